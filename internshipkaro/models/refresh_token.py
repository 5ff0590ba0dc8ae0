"""ORM model for the refresh-token ledger (rotation and revocation tracking)."""

from sqlalchemy import Column, DateTime, ForeignKey, String

from internshipkaro.models.base import Base
from internshipkaro.models.user import utcnow


class RefreshToken(Base):
    """
    One row per issued refresh token, keyed by the token's jti claim.

    family_id groups every token rotated from the same login. revoked_at is set
    when the token is rotated away, logged out, or its family is revoked;
    replaced_by points at the jti that superseded it on rotation.
    """

    __tablename__ = "refresh_tokens"

    jti = Column(String(36), primary_key=True)
    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    family_id = Column(String(36), nullable=False, index=True)
    issued_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
    revoked_at = Column(DateTime(timezone=True), nullable=True)
    replaced_by = Column(String(36), nullable=True)

    @property
    def is_revoked(self) -> bool:
        return self.revoked_at is not None
