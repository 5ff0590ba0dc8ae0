"""Unit tests for internshipkaro.core.security: bcrypt hasher and access/refresh token service."""

import unittest
from datetime import UTC, datetime, timedelta

import jwt

from internshipkaro.core.errors import (
    AuthenticationError,
    ExpiredTokenError,
    InvalidTokenError,
    WrongTokenTypeError,
)
from internshipkaro.core.security import (
    BCRYPT_ROUNDS,
    PasswordHasher,
    TokenService,
    TokenType,
)

ACCESS_SECRET = "test-access-secret-0123456789abcdef"
REFRESH_SECRET = "test-refresh-secret-0123456789abcdef"


def _service(**kwargs: object) -> TokenService:
    return TokenService(access_secret=ACCESS_SECRET, refresh_secret=REFRESH_SECRET, **kwargs)


class TestPasswordHasher(unittest.TestCase):
    """PasswordHasher hashes with bcrypt and verifies without raising."""

    def setUp(self) -> None:
        self.hasher = PasswordHasher(rounds=4)

    def test_default_cost_is_twelve(self) -> None:
        self.assertEqual(BCRYPT_ROUNDS, 12)
        self.assertEqual(PasswordHasher().rounds, 12)

    def test_hash_is_not_plaintext_and_verifies(self) -> None:
        hashed = self.hasher.hash("Passw0rd1")
        self.assertNotEqual(hashed, "Passw0rd1")
        self.assertTrue(hashed.startswith("$2b$04$"))
        self.assertTrue(self.hasher.verify("Passw0rd1", hashed))

    def test_wrong_password_does_not_verify(self) -> None:
        hashed = self.hasher.hash("Passw0rd1")
        self.assertFalse(self.hasher.verify("passw0rd1", hashed))

    def test_same_password_gets_different_salts(self) -> None:
        self.assertNotEqual(self.hasher.hash("Passw0rd1"), self.hasher.hash("Passw0rd1"))

    def test_malformed_hash_returns_false(self) -> None:
        self.assertFalse(self.hasher.verify("Passw0rd1", "not-a-bcrypt-hash"))

    def test_long_password_is_truncated_not_rejected(self) -> None:
        long_pw = "x" * 100
        hashed = self.hasher.hash(long_pw)
        self.assertTrue(self.hasher.verify(long_pw, hashed))


class TestTokenIssue(unittest.TestCase):
    """issue() mints an access/refresh pair with the expected claims."""

    def test_claims_and_secrets(self) -> None:
        pair = _service().issue("user-1", "a@b.com")
        access = jwt.decode(pair.access_token, ACCESS_SECRET, algorithms=["HS256"])
        refresh = jwt.decode(pair.refresh_token, REFRESH_SECRET, algorithms=["HS256"])
        self.assertEqual(access["userId"], "user-1")
        self.assertEqual(access["email"], "a@b.com")
        self.assertEqual(access["type"], "access")
        self.assertEqual(refresh["type"], "refresh")
        self.assertEqual(refresh["jti"], pair.refresh_jti)
        self.assertNotEqual(access["jti"], refresh["jti"])

    def test_default_ttls(self) -> None:
        pair = _service().issue("user-1", "a@b.com")
        self.assertEqual(pair.expires_in, 15 * 60)
        access = jwt.decode(pair.access_token, ACCESS_SECRET, algorithms=["HS256"])
        refresh = jwt.decode(pair.refresh_token, REFRESH_SECRET, algorithms=["HS256"])
        self.assertEqual(access["exp"] - access["iat"], 15 * 60)
        self.assertEqual(refresh["exp"] - refresh["iat"], 7 * 24 * 3600)
        self.assertGreater(pair.refresh_expires_at, datetime.now(UTC) + timedelta(days=6))

    def test_access_token_cannot_be_verified_with_refresh_secret(self) -> None:
        pair = _service().issue("user-1", "a@b.com")
        with self.assertRaises(jwt.InvalidSignatureError):
            jwt.decode(pair.access_token, REFRESH_SECRET, algorithms=["HS256"])

    def test_identical_secrets_rejected(self) -> None:
        with self.assertRaises(ValueError):
            TokenService(access_secret="same-secret", refresh_secret="same-secret")


class TestTokenVerify(unittest.TestCase):
    """verify() checks signature, expiry and the type claim."""

    def setUp(self) -> None:
        self.service = _service()
        self.pair = self.service.issue("user-1", "a@b.com")

    def test_valid_access_token(self) -> None:
        claims = self.service.verify(self.pair.access_token, TokenType.ACCESS)
        self.assertEqual(claims.user_id, "user-1")
        self.assertEqual(claims.email, "a@b.com")
        self.assertEqual(claims.type, TokenType.ACCESS)

    def test_valid_refresh_token(self) -> None:
        claims = self.service.verify(self.pair.refresh_token, TokenType.REFRESH)
        self.assertEqual(claims.type, TokenType.REFRESH)
        self.assertEqual(claims.jti, self.pair.refresh_jti)

    def test_refresh_token_where_access_expected(self) -> None:
        with self.assertRaises(WrongTokenTypeError):
            self.service.verify(self.pair.refresh_token, TokenType.ACCESS)

    def test_access_token_where_refresh_expected(self) -> None:
        with self.assertRaises(WrongTokenTypeError):
            self.service.verify(self.pair.access_token, TokenType.REFRESH)

    def test_type_claim_checked_even_with_matching_secret(self) -> None:
        now = datetime.now(UTC)
        forged = jwt.encode(
            {
                "userId": "user-1",
                "email": "a@b.com",
                "type": "refresh",
                "jti": "j-1",
                "iat": now,
                "exp": now + timedelta(minutes=5),
            },
            ACCESS_SECRET,
            algorithm="HS256",
        )
        with self.assertRaises(WrongTokenTypeError):
            self.service.verify(forged, TokenType.ACCESS)

    def test_expired_token(self) -> None:
        expired = _service(access_ttl=timedelta(seconds=-30)).issue("user-1", "a@b.com")
        with self.assertRaises(ExpiredTokenError):
            self.service.verify(expired.access_token, TokenType.ACCESS)

    def test_zero_ttl_token_is_rejected(self) -> None:
        zero = _service(access_ttl=timedelta(0)).issue("user-1", "a@b.com")
        with self.assertRaises(ExpiredTokenError):
            self.service.verify(zero.access_token, TokenType.ACCESS)

    def test_wrongly_signed_token(self) -> None:
        now = datetime.now(UTC)
        foreign = jwt.encode(
            {
                "userId": "user-1",
                "email": "a@b.com",
                "type": "refresh",
                "jti": "j-1",
                "iat": now,
                "exp": now + timedelta(days=1),
            },
            "some-other-secret-0123456789abcdef",
            algorithm="HS256",
        )
        with self.assertRaises(InvalidTokenError):
            self.service.verify(foreign, TokenType.REFRESH)

    def test_garbage_and_empty_tokens(self) -> None:
        for token in ("", "not.a.jwt", "abc"):
            with self.subTest(token=token):
                with self.assertRaises(InvalidTokenError):
                    self.service.verify(token, TokenType.ACCESS)

    def test_missing_claims(self) -> None:
        now = datetime.now(UTC)
        token = jwt.encode(
            {"type": "access", "iat": now, "exp": now + timedelta(minutes=5)},
            ACCESS_SECRET,
            algorithm="HS256",
        )
        with self.assertRaises(InvalidTokenError):
            self.service.verify(token, TokenType.ACCESS)

    def test_all_failures_are_authentication_errors(self) -> None:
        for exc_type in (InvalidTokenError, ExpiredTokenError, WrongTokenTypeError):
            self.assertTrue(issubclass(exc_type, AuthenticationError))


if __name__ == "__main__":
    unittest.main()
