"""Tests for the credential store and refresh-token ledger helpers (SQLite and mocked sessions)."""

import unittest
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from internshipkaro.core.errors import ConflictError
from internshipkaro.core.security import TokenPair
from internshipkaro.models import Base, ExperienceLevel, RefreshToken, SubscriptionStatus, User
from internshipkaro.services.refresh_tokens import (
    purge_refresh_tokens,
    record_refresh_token,
    revoke_family,
    revoke_user_tokens,
)
from internshipkaro.services.users import (
    apply_profile_changes,
    create_user,
    get_user_by_email,
)


def _session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autoflush=False)()


def _new_user(session, email: str = "a@b.com") -> User:
    return create_user(
        session,
        email=email,
        password_hash="$2b$04$notarealhash",
        first_name="A",
        last_name="B",
        experience_level=ExperienceLevel.BEGINNER,
    )


def _pair(jti: str) -> TokenPair:
    return TokenPair(
        access_token="access",
        refresh_token="refresh",
        expires_in=900,
        refresh_jti=jti,
        refresh_expires_at=datetime.now(UTC) + timedelta(days=7),
    )


class TestCreateUser(unittest.TestCase):
    """create_user writes a FREE-tier user and maps unique violations to ConflictError."""

    def setUp(self) -> None:
        self.session = _session()

    def tearDown(self) -> None:
        self.session.close()

    def test_new_user_defaults(self) -> None:
        user = _new_user(self.session)
        self.session.commit()
        stored = get_user_by_email(self.session, "a@b.com")
        self.assertIsNotNone(stored)
        self.assertEqual(stored.subscription_status, SubscriptionStatus.FREE)
        self.assertIsNotNone(stored.last_active)
        self.assertEqual(len(user.id), 36)

    def test_duplicate_email_at_the_store_raises_conflict(self) -> None:
        _new_user(self.session)
        self.session.commit()
        with self.assertRaises(ConflictError):
            _new_user(self.session)
        self.assertEqual(self.session.query(User).count(), 1)

    def test_email_lookup_is_case_sensitive(self) -> None:
        _new_user(self.session)
        self.session.commit()
        self.assertIsNone(get_user_by_email(self.session, "A@B.com"))


class TestApplyProfileChanges(unittest.TestCase):
    def test_only_mutable_fields_are_applied(self) -> None:
        user = User(email="a@b.com", first_name="A", last_name="B")
        before = datetime.now(UTC) - timedelta(seconds=1)
        user.updated_at = before
        applied = apply_profile_changes(
            user, {"bio": "x", "email": "evil@b.com", "subscription_status": "PREMIUM"}
        )
        self.assertEqual(applied, ["bio"])
        self.assertEqual(user.bio, "x")
        self.assertEqual(user.email, "a@b.com")
        self.assertGreater(user.updated_at, before)

    def test_empty_change_set_still_stamps_updated_at(self) -> None:
        user = User(email="a@b.com", first_name="A", last_name="B")
        user.updated_at = datetime.now(UTC) - timedelta(seconds=1)
        before = user.updated_at
        self.assertEqual(apply_profile_changes(user, {}), [])
        self.assertGreater(user.updated_at, before)


class TestRefreshTokenLedger(unittest.TestCase):
    """record/revoke helpers against a real (SQLite) session."""

    def setUp(self) -> None:
        self.session = _session()
        self.user = _new_user(self.session)
        self.other = _new_user(self.session, email="c@d.com")
        self.session.commit()

    def tearDown(self) -> None:
        self.session.close()

    def test_record_starts_new_family(self) -> None:
        first = record_refresh_token(self.session, _pair("j-1"), self.user.id)
        second = record_refresh_token(self.session, _pair("j-2"), self.user.id)
        self.assertNotEqual(first.family_id, second.family_id)
        self.assertFalse(first.is_revoked)

    def test_record_within_family(self) -> None:
        first = record_refresh_token(self.session, _pair("j-1"), self.user.id)
        second = record_refresh_token(
            self.session, _pair("j-2"), self.user.id, family_id=first.family_id
        )
        self.assertEqual(first.family_id, second.family_id)

    def test_revoke_family_leaves_other_families(self) -> None:
        first = record_refresh_token(self.session, _pair("j-1"), self.user.id)
        record_refresh_token(self.session, _pair("j-2"), self.user.id, family_id=first.family_id)
        record_refresh_token(self.session, _pair("j-3"), self.user.id)
        self.session.commit()

        self.assertEqual(revoke_family(self.session, first.family_id), 2)
        self.session.commit()
        self.assertIsNone(self.session.get(RefreshToken, "j-3").revoked_at)
        self.assertIsNotNone(self.session.get(RefreshToken, "j-1").revoked_at)

    def test_revoke_user_tokens_only_touches_that_user(self) -> None:
        record_refresh_token(self.session, _pair("j-1"), self.user.id)
        record_refresh_token(self.session, _pair("j-2"), self.user.id)
        record_refresh_token(self.session, _pair("j-3"), self.other.id)
        self.session.commit()

        self.assertEqual(revoke_user_tokens(self.session, self.user.id), 2)
        self.session.commit()
        self.assertIsNone(self.session.get(RefreshToken, "j-3").revoked_at)
        # Already-revoked rows are not counted again.
        self.assertEqual(revoke_user_tokens(self.session, self.user.id), 0)


class TestPurgeRefreshTokens(unittest.TestCase):
    """purge_refresh_tokens deletes stale rows and commits."""

    def test_returns_deleted_count_and_commits(self) -> None:
        settings = MagicMock()
        settings.TOKEN_PURGE_GRACE_HOURS = 24
        session = MagicMock()
        session.query.return_value.filter.return_value.delete.return_value = 3
        self.assertEqual(purge_refresh_tokens(session, settings), 3)
        session.query.assert_called_once_with(RefreshToken)
        session.commit.assert_called_once()

    def test_nothing_to_purge(self) -> None:
        settings = MagicMock()
        settings.TOKEN_PURGE_GRACE_HOURS = 0
        session = MagicMock()
        session.query.return_value.filter.return_value.delete.return_value = 0
        self.assertEqual(purge_refresh_tokens(session, settings), 0)
        session.commit.assert_called_once()


if __name__ == "__main__":
    unittest.main()
