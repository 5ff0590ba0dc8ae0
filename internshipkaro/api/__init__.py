"""HTTP routes."""

from fastapi import APIRouter

from internshipkaro.api import auth, health

# Mounted under settings.API_PREFIX.
router = APIRouter()
router.include_router(auth.router, prefix="/auth", tags=["auth"])

health_router = health.router

__all__ = ["router", "health_router"]
