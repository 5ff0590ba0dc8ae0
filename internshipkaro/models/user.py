"""ORM model for application users (credential store and learner profile)."""

import enum
import uuid
from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, Enum, String, Text

from internshipkaro.models.base import Base


def utcnow() -> datetime:
    return datetime.now(UTC)


class ExperienceLevel(str, enum.Enum):
    BEGINNER = "BEGINNER"
    INTERMEDIATE = "INTERMEDIATE"
    ADVANCED = "ADVANCED"
    EXPERT = "EXPERT"


class SubscriptionStatus(str, enum.Enum):
    FREE = "FREE"
    BASIC = "BASIC"
    PREMIUM = "PREMIUM"
    ENTERPRISE = "ENTERPRISE"


class User(Base):
    """
    User account for JWT authentication and the learner profile shown in the dashboard.

    email is unique at the store and compared case-sensitively as stored.
    password_hash is never serialized to clients.
    """

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    avatar = Column(String(2048), nullable=True)
    bio = Column(Text, nullable=True)
    current_role = Column(String(255), nullable=True)
    location = Column(String(255), nullable=True)
    linkedin_profile = Column(String(2048), nullable=True)
    portfolio_url = Column(String(2048), nullable=True)
    experience_level = Column(
        Enum(ExperienceLevel, name="experience_level"),
        nullable=False,
        default=ExperienceLevel.BEGINNER,
    )
    subscription_status = Column(
        Enum(SubscriptionStatus, name="subscription_status"),
        nullable=False,
        default=SubscriptionStatus.FREE,
    )
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    last_active = Column(DateTime(timezone=True), nullable=True)
