"""Password hashing and JWT issuance/verification for authentication."""

import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any

import bcrypt
import jwt
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from internshipkaro.core.config import Settings
from internshipkaro.core.errors import (
    ExpiredTokenError,
    InvalidTokenError,
    WrongTokenTypeError,
)

# Bcrypt cost (rounds); 12 is the production default.
BCRYPT_ROUNDS = 12
# bcrypt only looks at the first 72 bytes of input.
BCRYPT_MAX_BYTES = 72

# Min/max lengths for password validation.
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128


class TokenType(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"


class PasswordHasher:
    """Adaptive password hashing (bcrypt). Never logs or returns the plaintext."""

    def __init__(self, rounds: int = BCRYPT_ROUNDS) -> None:
        self.rounds = rounds

    def hash(self, plain_password: str) -> str:
        """Hash a plain-text password for storage."""
        pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
        return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, plain_password: str, hashed: str) -> bool:
        """Verify a plain password against a stored hash. A malformed hash never matches."""
        pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
        try:
            return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
        except (ValueError, TypeError):
            return False


class TokenClaims(BaseModel):
    """Decoded, verified payload of an access or refresh token."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    user_id: str = Field(..., alias="userId", min_length=1)
    email: str
    type: TokenType
    jti: str = Field(..., min_length=1)
    iat: int
    exp: int

    @property
    def expires_at(self) -> datetime:
        return datetime.fromtimestamp(self.exp, tz=UTC)


@dataclass(frozen=True)
class TokenPair:
    """Freshly minted access + refresh tokens. expires_in is the access TTL in seconds."""

    access_token: str
    refresh_token: str
    expires_in: int
    refresh_jti: str
    refresh_expires_at: datetime


class TokenService:
    """
    Mint and verify the access/refresh JWT pair.

    Both tokens share the claim shape {userId, email, type, jti, iat, exp}; they
    are told apart by the type claim and by being signed with different secrets.
    """

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        access_ttl: timedelta = timedelta(minutes=15),
        refresh_ttl: timedelta = timedelta(days=7),
        algorithm: str = "HS256",
    ) -> None:
        if access_secret == refresh_secret:
            raise ValueError("access and refresh tokens must use different secrets")
        self._secrets = {
            TokenType.ACCESS: access_secret,
            TokenType.REFRESH: refresh_secret,
        }
        self._ttls = {
            TokenType.ACCESS: access_ttl,
            TokenType.REFRESH: refresh_ttl,
        }
        self.algorithm = algorithm

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            access_secret=settings.JWT_ACCESS_SECRET.get_secret_value(),
            refresh_secret=settings.JWT_REFRESH_SECRET.get_secret_value(),
            access_ttl=timedelta(minutes=settings.JWT_ACCESS_EXPIRE_MINUTES),
            refresh_ttl=timedelta(days=settings.JWT_REFRESH_EXPIRE_DAYS),
            algorithm=settings.JWT_ALGORITHM,
        )

    @property
    def access_ttl(self) -> timedelta:
        return self._ttls[TokenType.ACCESS]

    def _encode(self, user_id: str, email: str, token_type: TokenType, now: datetime) -> tuple[str, str, datetime]:
        jti = str(uuid.uuid4())
        expire = now + self._ttls[token_type]
        payload: dict[str, Any] = {
            "userId": user_id,
            "email": email,
            "type": token_type.value,
            "jti": jti,
            "iat": now,
            "exp": expire,
        }
        token = jwt.encode(payload, self._secrets[token_type], algorithm=self.algorithm)
        return token, jti, expire

    def issue(self, user_id: str, email: str) -> TokenPair:
        """Create a new access + refresh token pair for a user."""
        now = datetime.now(UTC)
        access_token, _, _ = self._encode(user_id, email, TokenType.ACCESS, now)
        refresh_token, refresh_jti, refresh_expires_at = self._encode(
            user_id, email, TokenType.REFRESH, now
        )
        return TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=int(self.access_ttl.total_seconds()),
            refresh_jti=refresh_jti,
            refresh_expires_at=refresh_expires_at,
        )

    def verify(self, token: str, expected_type: TokenType) -> TokenClaims:
        """
        Validate signature, expiry and type; return the claims.

        Raises ExpiredTokenError, InvalidTokenError or WrongTokenTypeError.
        """
        if not token:
            raise InvalidTokenError()
        try:
            payload = jwt.decode(
                token,
                self._secrets[expected_type],
                algorithms=[self.algorithm],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            raise ExpiredTokenError()
        except jwt.InvalidSignatureError:
            # A token of the other type is signed with the other secret; report the
            # type mismatch instead of a bare signature failure. Nothing is trusted here.
            actual = self._unverified_type(token)
            if actual is not None and actual != expected_type.value:
                raise WrongTokenTypeError(expected_type.value, actual)
            raise InvalidTokenError()
        except jwt.PyJWTError:
            raise InvalidTokenError()

        if payload.get("type") != expected_type.value:
            raise WrongTokenTypeError(expected_type.value, payload.get("type"))
        try:
            return TokenClaims.model_validate(payload)
        except PydanticValidationError:
            raise InvalidTokenError("Invalid token payload")

    @staticmethod
    def _unverified_type(token: str) -> str | None:
        try:
            payload = jwt.decode(token, options={"verify_signature": False})
        except jwt.PyJWTError:
            return None
        value = payload.get("type")
        return value if isinstance(value, str) else None
