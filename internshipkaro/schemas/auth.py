"""Request/response schemas for auth endpoints. JSON field names are camelCase."""

from datetime import datetime
from typing import Annotated, Any

from email_validator import EmailNotValidError, validate_email
from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from internshipkaro.core.security import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN
from internshipkaro.models.user import ExperienceLevel, SubscriptionStatus

NAME_MAX_LEN = 100
EMAIL_MAX_LEN = 255
BIO_MAX_LEN = 500


class CamelModel(BaseModel):
    """Base for API models: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _check_email(value: str) -> str:
    """Reject malformed addresses but keep the address exactly as submitted."""
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as exc:
        raise ValueError(f"value is not a valid email address: {exc}") from exc
    return value


# The submitted text is stored and compared unchanged; no case or domain normalization.
EmailAddress = Annotated[str, Field(max_length=EMAIL_MAX_LEN), AfterValidator(_check_email)]


def _validate_http_url(value: str | None) -> str | None:
    """Accept only http(s) URLs; blank clears the field."""
    if value is None or not value.strip():
        return None
    s = value.strip().lower()
    if not (s.startswith("http://") or s.startswith("https://")):
        raise ValueError("must be an http or https URL")
    return value.strip()


class RegisterRequest(CamelModel):
    """Payload for POST /auth/register."""

    email: EmailAddress = Field(..., description="Email address (unique)")
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    first_name: str = Field(..., min_length=1, max_length=NAME_MAX_LEN)
    last_name: str = Field(..., min_length=1, max_length=NAME_MAX_LEN)
    experience_level: ExperienceLevel

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_names(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class LoginRequest(CamelModel):
    """Credentials for login."""

    email: EmailAddress
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN)


class RefreshRequest(CamelModel):
    """
    Body for POST /auth/refresh. A missing or non-string token is answered
    with 401 by the refresh flow, not 400.
    """

    refresh_token: Any = None


class ProfileUpdateRequest(CamelModel):
    """
    Partial profile update. Only the fields listed here are mutable; anything
    else (email, password, subscriptionStatus, ...) is rejected.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="forbid"
    )

    # Typed as str: an explicit null is rejected, omission leaves the value untouched.
    first_name: str = Field(None, min_length=1, max_length=NAME_MAX_LEN)
    last_name: str = Field(None, min_length=1, max_length=NAME_MAX_LEN)
    bio: str | None = Field(None, max_length=BIO_MAX_LEN)
    current_role: str | None = Field(None, max_length=255)
    location: str | None = Field(None, max_length=255)
    linkedin_profile: str | None = Field(None, max_length=2048)
    portfolio_url: str | None = Field(None, max_length=2048)

    @field_validator("linkedin_profile", "portfolio_url")
    @classmethod
    def validate_urls(cls, v: str | None) -> str | None:
        return _validate_http_url(v)

    def changes(self) -> dict[str, Any]:
        """Fields the client actually sent, keyed by ORM attribute name."""
        return self.model_dump(exclude_unset=True)


class UserPublic(CamelModel):
    """User as returned to clients. Never carries the password hash."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    id: str
    email: str
    first_name: str
    last_name: str
    avatar: str | None = None
    bio: str | None = None
    current_role: str | None = None
    experience_level: ExperienceLevel
    location: str | None = None
    linkedin_profile: str | None = None
    portfolio_url: str | None = None
    subscription_status: SubscriptionStatus
    created_at: datetime
    updated_at: datetime
    last_active: datetime | None = None


class TokenEnvelope(CamelModel):
    access_token: str
    refresh_token: str
    expires_in: int = Field(..., description="Access token lifetime in seconds")


class AuthData(CamelModel):
    user: UserPublic
    tokens: TokenEnvelope


class UserData(CamelModel):
    user: UserPublic


class AuthResponse(CamelModel):
    """Envelope for register/login/refresh."""

    success: bool = True
    message: str
    data: AuthData


class ProfileResponse(CamelModel):
    success: bool = True
    message: str | None = None
    data: UserData


class MessageResponse(CamelModel):
    success: bool = True
    message: str


class CurrentUser(BaseModel):
    """Identity carried by a verified access token (id, email) for dependency injection."""

    model_config = ConfigDict(frozen=True)

    id: str
    email: str
