"""Refresh-token ledger: record issued tokens, rotate, revoke, and purge stale rows."""

import logging
import uuid
from datetime import timedelta
from typing import TYPE_CHECKING

from sqlalchemy import or_
from sqlalchemy.orm import Session

from internshipkaro.core.security import TokenPair
from internshipkaro.models import RefreshToken
from internshipkaro.models.user import utcnow

if TYPE_CHECKING:
    from internshipkaro.core.config import Settings

logger = logging.getLogger(__name__)


def record_refresh_token(
    session: Session,
    pair: TokenPair,
    user_id: str,
    family_id: str | None = None,
) -> RefreshToken:
    """Add a ledger row for pair's refresh token. A None family_id starts a new family."""
    row = RefreshToken(
        jti=pair.refresh_jti,
        user_id=user_id,
        family_id=family_id or str(uuid.uuid4()),
        issued_at=utcnow(),
        expires_at=pair.refresh_expires_at,
    )
    session.add(row)
    return row


def get_refresh_token(session: Session, jti: str, *, for_update: bool = False) -> RefreshToken | None:
    query = session.query(RefreshToken).filter(RefreshToken.jti == jti)
    if for_update:
        query = query.with_for_update()
    return query.first()


def mark_rotated(row: RefreshToken, replaced_by: str) -> None:
    row.revoked_at = utcnow()
    row.replaced_by = replaced_by


def revoke_family(session: Session, family_id: str) -> int:
    """Revoke every still-active token descended from the same login."""
    return (
        session.query(RefreshToken)
        .filter(RefreshToken.family_id == family_id, RefreshToken.revoked_at.is_(None))
        .update({RefreshToken.revoked_at: utcnow()}, synchronize_session=False)
    )


def revoke_user_tokens(session: Session, user_id: str) -> int:
    """Revoke all of a user's active refresh tokens (logout)."""
    return (
        session.query(RefreshToken)
        .filter(RefreshToken.user_id == user_id, RefreshToken.revoked_at.is_(None))
        .update({RefreshToken.revoked_at: utcnow()}, synchronize_session=False)
    )


def purge_refresh_tokens(session: Session, settings: "Settings") -> int:
    """
    Delete ledger rows that expired or were revoked more than TOKEN_PURGE_GRACE_HOURS ago.

    Idempotent: safe to run repeatedly. Returns the number of rows deleted.
    """
    cutoff = utcnow() - timedelta(hours=settings.TOKEN_PURGE_GRACE_HOURS)
    deleted_count = (
        session.query(RefreshToken)
        .filter(
            or_(
                RefreshToken.expires_at < cutoff,
                RefreshToken.revoked_at < cutoff,
            )
        )
        .delete(synchronize_session=False)
    )
    session.commit()

    if deleted_count > 0:
        logger.info(
            "Refresh-token purge: cutoff=%s, tokens_deleted=%s",
            cutoff.isoformat(),
            deleted_count,
        )
    return deleted_count
