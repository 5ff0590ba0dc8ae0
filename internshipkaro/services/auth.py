"""
Authentication flows: register, login, refresh, profile read/update, logout.

Each method runs inside the caller's request-scoped session and commits once
on success. Errors are raised as core.errors exceptions and mapped to HTTP
responses by the app's exception handlers.
"""

import logging
from typing import Any

from sqlalchemy.orm import Session

from internshipkaro.core.errors import (
    AuthenticationError,
    ConflictError,
    InvalidTokenError,
    MissingTokenError,
    NotFoundError,
    TokenReuseError,
)
from internshipkaro.core.security import PasswordHasher, TokenPair, TokenService, TokenType
from internshipkaro.models import User
from internshipkaro.schemas.auth import RegisterRequest
from internshipkaro.services.refresh_tokens import (
    get_refresh_token,
    mark_rotated,
    record_refresh_token,
    revoke_family,
    revoke_user_tokens,
)
from internshipkaro.services.users import (
    DUPLICATE_EMAIL_MESSAGE,
    apply_profile_changes,
    create_user,
    get_user_by_email,
    get_user_by_id,
    touch_last_active,
)

logger = logging.getLogger(__name__)

# Same text for unknown email and wrong password so the response does not reveal which.
INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"
USER_NOT_FOUND_MESSAGE = "User not found"


class AuthService:
    """Orchestrates the credential store, password hasher, token service and refresh ledger."""

    def __init__(self, db: Session, hasher: PasswordHasher, tokens: TokenService) -> None:
        self.db = db
        self.hasher = hasher
        self.tokens = tokens

    def _start_session(self, user: User, family_id: str | None = None) -> TokenPair:
        pair = self.tokens.issue(user.id, user.email)
        record_refresh_token(self.db, pair, user.id, family_id=family_id)
        return pair

    def register(self, body: RegisterRequest) -> tuple[User, TokenPair]:
        """Create a FREE-tier user and open a session. Duplicate email raises ConflictError."""
        if get_user_by_email(self.db, body.email) is not None:
            raise ConflictError(DUPLICATE_EMAIL_MESSAGE)

        user = create_user(
            self.db,
            email=body.email,
            password_hash=self.hasher.hash(body.password),
            first_name=body.first_name,
            last_name=body.last_name,
            experience_level=body.experience_level,
        )
        pair = self._start_session(user)
        self.db.commit()
        logger.info("User registered", extra={"user_id": user.id})
        return user, pair

    def login(self, email: str, password: str) -> tuple[User, TokenPair]:
        # TODO: equalize latency for unknown emails (hash against a dummy) once the
        # mitigation is agreed; today an unknown email returns before any bcrypt work.
        user = get_user_by_email(self.db, email)
        if user is None:
            logger.info("Login failed", extra={"reason": "unknown_email"})
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE, code="INVALID_CREDENTIALS")
        if not self.hasher.verify(password, user.password_hash):
            logger.info("Login failed", extra={"reason": "bad_password", "user_id": user.id})
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE, code="INVALID_CREDENTIALS")

        touch_last_active(user)
        pair = self._start_session(user)
        self.db.commit()
        logger.info("Login succeeded", extra={"user_id": user.id})
        return user, pair

    def refresh(self, refresh_token: Any) -> tuple[User, TokenPair]:
        """
        Exchange a refresh token for a new pair, revoking the presented one.

        Presenting a token that was already rotated away or revoked revokes the
        whole family, so a stolen token stops working for its legitimate owner
        too and both must log in again.
        """
        if not refresh_token:
            raise MissingTokenError("Refresh token is required")
        if not isinstance(refresh_token, str):
            raise InvalidTokenError("Invalid refresh token")

        claims = self.tokens.verify(refresh_token, TokenType.REFRESH)

        user = get_user_by_id(self.db, claims.user_id)
        if user is None:
            raise AuthenticationError(USER_NOT_FOUND_MESSAGE, code="USER_NOT_FOUND")

        row = get_refresh_token(self.db, claims.jti, for_update=True)
        if row is None or row.user_id != user.id:
            raise InvalidTokenError("Unknown refresh token")
        if row.is_revoked:
            revoked = revoke_family(self.db, row.family_id)
            self.db.commit()
            logger.warning(
                "Refresh token reuse detected; family revoked",
                extra={"user_id": user.id, "family_id": row.family_id, "revoked": revoked},
            )
            raise TokenReuseError()

        pair = self._start_session(user, family_id=row.family_id)
        mark_rotated(row, replaced_by=pair.refresh_jti)
        self.db.commit()
        logger.info("Refresh token rotated", extra={"user_id": user.id})
        return user, pair

    def get_profile(self, user_id: str) -> User:
        user = get_user_by_id(self.db, user_id)
        if user is None:
            raise NotFoundError(USER_NOT_FOUND_MESSAGE)
        return user

    def update_profile(self, user_id: str, changes: dict[str, Any]) -> User:
        """Apply a partial profile update; updated_at is always stamped."""
        user = self.get_profile(user_id)
        applied = apply_profile_changes(user, changes)
        self.db.commit()
        logger.info("Profile updated", extra={"user_id": user.id, "fields": ",".join(sorted(applied))})
        return user

    def logout(self, user_id: str) -> None:
        """
        Record activity and revoke outstanding refresh tokens. The presented access
        token stays valid until it expires.
        """
        user = self.get_profile(user_id)
        touch_last_active(user)
        revoked = revoke_user_tokens(self.db, user.id)
        self.db.commit()
        logger.info("Logout", extra={"user_id": user.id, "refresh_tokens_revoked": revoked})
