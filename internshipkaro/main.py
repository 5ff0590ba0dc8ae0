"""FastAPI application factory. No business logic; only wiring and middleware.

Run with:
  uvicorn internshipkaro.main:create_app --factory
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine

from internshipkaro.api import health_router, router as api_router
from internshipkaro.core.config import Settings, get_settings
from internshipkaro.core.database import build_engine, build_session_factory
from internshipkaro.core.errors import register_exception_handlers
from internshipkaro.core.security import PasswordHasher, TokenService


def create_app(settings: Settings | None = None, engine: Engine | None = None) -> FastAPI:
    """
    Build the application and its long-lived collaborators.

    The engine, session factory, password hasher and token service are created
    once here and stored on app.state; request handlers reach them through
    api.deps.RequestContext. Pass engine to run against an existing database
    (the app then leaves disposing it to the caller).
    """
    settings = settings or get_settings()
    owns_engine = engine is None
    engine = engine or build_engine(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        if owns_engine:
            engine.dispose()

    app = FastAPI(
        title="InternshipKaro API",
        version="0.1.0",
        docs_url="/docs" if settings.APP_ENV == "dev" else None,
        redoc_url="/redoc" if settings.APP_ENV == "dev" else None,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.password_hasher = PasswordHasher(rounds=settings.BCRYPT_ROUNDS)
    app.state.token_service = TokenService.from_settings(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    app.include_router(api_router, prefix=settings.API_PREFIX)
    app.include_router(health_router, prefix="/health", tags=["health"])

    @app.get("/")
    def root() -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"message": "InternshipKaro API"}

    return app
