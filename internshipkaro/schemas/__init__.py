"""Pydantic request/response schemas."""

from internshipkaro.schemas.auth import (
    AuthData,
    AuthResponse,
    CurrentUser,
    LoginRequest,
    MessageResponse,
    ProfileResponse,
    ProfileUpdateRequest,
    RefreshRequest,
    RegisterRequest,
    TokenEnvelope,
    UserData,
    UserPublic,
)
from internshipkaro.schemas.health import HealthResponse

__all__ = [
    "AuthData",
    "AuthResponse",
    "CurrentUser",
    "HealthResponse",
    "LoginRequest",
    "MessageResponse",
    "ProfileResponse",
    "ProfileUpdateRequest",
    "RefreshRequest",
    "RegisterRequest",
    "TokenEnvelope",
    "UserData",
    "UserPublic",
]
