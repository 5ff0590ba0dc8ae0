"""
Request-scoped dependencies: the typed request context and the bearer-token guard.

Everything a handler may touch (DB session, settings, hasher, token service,
and the authenticated identity on protected routes) is declared on
RequestContext; nothing is looked up from module globals.
"""

from dataclasses import dataclass, replace
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from internshipkaro.core.config import Settings
from internshipkaro.core.database import get_db
from internshipkaro.core.errors import MissingTokenError
from internshipkaro.core.security import PasswordHasher, TokenService, TokenType
from internshipkaro.schemas.auth import CurrentUser
from internshipkaro.services.auth import AuthService

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class RequestContext:
    db: Session
    settings: Settings
    hasher: PasswordHasher
    tokens: TokenService
    current_user: CurrentUser | None = None

    def auth_service(self) -> AuthService:
        return AuthService(self.db, self.hasher, self.tokens)


def get_context(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
) -> RequestContext:
    """Build the per-request context from the services created at app startup."""
    state = request.app.state
    return RequestContext(
        db=db,
        settings=state.settings,
        hasher=state.password_hasher,
        tokens=state.token_service,
    )


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    ctx: Annotated[RequestContext, Depends(get_context)],
) -> CurrentUser:
    """
    Dependency: require a valid Bearer access token and return its identity.

    Raises 401 if the header is missing, not Bearer, or the token is invalid,
    expired, or a refresh token. Whether the user row still exists is left to
    the handler.
    """
    if credentials is None:
        raise MissingTokenError()
    claims = ctx.tokens.verify(credentials.credentials, TokenType.ACCESS)
    return CurrentUser(id=claims.user_id, email=claims.email)


def get_authenticated_context(
    ctx: Annotated[RequestContext, Depends(get_context)],
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> RequestContext:
    return replace(ctx, current_user=current_user)
