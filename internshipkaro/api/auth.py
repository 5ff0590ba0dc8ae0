"""Auth routes: register, login, refresh, profile get/update, logout."""

from typing import Annotated

from fastapi import APIRouter, Body, Depends, status

from internshipkaro.api.deps import RequestContext, get_authenticated_context, get_context
from internshipkaro.core.security import TokenPair
from internshipkaro.models import User
from internshipkaro.schemas.auth import (
    AuthData,
    AuthResponse,
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

router = APIRouter()


def _auth_response(message: str, user: User, pair: TokenPair) -> AuthResponse:
    return AuthResponse(
        message=message,
        data=AuthData(
            user=UserPublic.model_validate(user),
            tokens=TokenEnvelope(
                access_token=pair.access_token,
                refresh_token=pair.refresh_token,
                expires_in=pair.expires_in,
            ),
        ),
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    ctx: Annotated[RequestContext, Depends(get_context)],
) -> AuthResponse:
    """Create an account and return the new user with an access/refresh token pair."""
    user, pair = ctx.auth_service().register(body)
    return _auth_response("User registered successfully", user, pair)


@router.post("/login", response_model=AuthResponse)
def login(
    body: LoginRequest,
    ctx: Annotated[RequestContext, Depends(get_context)],
) -> AuthResponse:
    """
    Authenticate with email and password; returns the user and a token pair.
    Send the access token on protected routes as: Authorization: Bearer <accessToken>
    """
    user, pair = ctx.auth_service().login(body.email, body.password)
    return _auth_response("Login successful", user, pair)


@router.post("/refresh", response_model=AuthResponse)
def refresh(
    ctx: Annotated[RequestContext, Depends(get_context)],
    body: Annotated[RefreshRequest | None, Body()] = None,
) -> AuthResponse:
    """Exchange a refresh token for a new pair. The presented refresh token is revoked."""
    token = body.refresh_token if body is not None else None
    user, pair = ctx.auth_service().refresh(token)
    return _auth_response("Tokens refreshed successfully", user, pair)


@router.get("/profile", response_model=ProfileResponse)
def get_profile(
    ctx: Annotated[RequestContext, Depends(get_authenticated_context)],
) -> ProfileResponse:
    user = ctx.auth_service().get_profile(ctx.current_user.id)
    return ProfileResponse(data=UserData(user=UserPublic.model_validate(user)))


@router.put("/profile", response_model=ProfileResponse)
def update_profile(
    body: ProfileUpdateRequest,
    ctx: Annotated[RequestContext, Depends(get_authenticated_context)],
) -> ProfileResponse:
    """Update any subset of the mutable profile fields. Unknown fields are rejected with 400."""
    user = ctx.auth_service().update_profile(ctx.current_user.id, body.changes())
    return ProfileResponse(
        message="Profile updated successfully",
        data=UserData(user=UserPublic.model_validate(user)),
    )


@router.post("/logout", response_model=MessageResponse)
def logout(
    ctx: Annotated[RequestContext, Depends(get_authenticated_context)],
) -> MessageResponse:
    """Revoke this user's refresh tokens. Clients should also discard their access token."""
    ctx.auth_service().logout(ctx.current_user.id)
    return MessageResponse(message="Logged out successfully")
