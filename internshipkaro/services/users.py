"""Credential store access: user lookups and writes. Callers own the transaction."""

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from internshipkaro.core.errors import ConflictError
from internshipkaro.models.user import ExperienceLevel, SubscriptionStatus, User, utcnow

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = "User with this email already exists"

# Attributes a user may change through PUT /auth/profile.
MUTABLE_PROFILE_FIELDS = frozenset(
    {
        "first_name",
        "last_name",
        "bio",
        "current_role",
        "location",
        "linkedin_profile",
        "portfolio_url",
    }
)


def get_user_by_email(session: Session, email: str) -> User | None:
    return session.query(User).filter(User.email == email).first()


def get_user_by_id(session: Session, user_id: str) -> User | None:
    return session.get(User, user_id)


def create_user(
    session: Session,
    *,
    email: str,
    password_hash: str,
    first_name: str,
    last_name: str,
    experience_level: ExperienceLevel,
) -> User:
    """
    Insert a new FREE-tier user and flush so the unique email index is checked now.

    A concurrent registration that wins the race surfaces here as IntegrityError
    and is reported as ConflictError.
    """
    now = utcnow()
    user = User(
        email=email,
        password_hash=password_hash,
        first_name=first_name,
        last_name=last_name,
        experience_level=experience_level,
        subscription_status=SubscriptionStatus.FREE,
        created_at=now,
        updated_at=now,
        last_active=now,
    )
    session.add(user)
    try:
        session.flush()
    except IntegrityError as e:
        session.rollback()
        logger.info("Registration lost unique-email race")
        raise ConflictError(DUPLICATE_EMAIL_MESSAGE) from e
    return user


def touch_last_active(user: User) -> None:
    user.last_active = utcnow()


def apply_profile_changes(user: User, changes: dict[str, Any]) -> list[str]:
    """Set the allowed profile fields from changes and stamp updated_at. Returns the fields set."""
    applied = []
    for field, value in changes.items():
        if field not in MUTABLE_PROFILE_FIELDS:
            continue
        setattr(user, field, value)
        applied.append(field)
    user.updated_at = utcnow()
    return applied
