"""SQLAlchemy ORM models."""

from internshipkaro.models.base import Base
from internshipkaro.models.refresh_token import RefreshToken
from internshipkaro.models.user import ExperienceLevel, SubscriptionStatus, User

__all__ = ["Base", "ExperienceLevel", "RefreshToken", "SubscriptionStatus", "User"]
