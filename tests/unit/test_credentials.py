"""
Unit tests for BcryptJwtCredentials adapter.

Tests verify:
- Password hashing (bcrypt, cost factor, verifiable)
- Dummy-hash comparison for missing accounts
- Token signing, expiry and tamper detection
"""

import re

import jwt
import pytest

from src.adapters.security.credentials import BcryptJwtCredentials


@pytest.fixture
def creds() -> BcryptJwtCredentials:
    return BcryptJwtCredentials(secret="s3cret", bcrypt_cost=4, expires_minutes=5)


class TestPasswordHashing:
    def test_hash_is_bcrypt(self, creds: BcryptJwtCredentials) -> None:
        password_hash = creds.hash_password("password123")

        assert re.match(r"^\$2[aby]\$", password_hash)

    def test_hash_uses_configured_cost(self) -> None:
        creds = BcryptJwtCredentials(secret="s", bcrypt_cost=10)

        cost = int(creds.hash_password("password123").split("$")[2])

        assert cost == 10

    def test_hash_is_salted(self, creds: BcryptJwtCredentials) -> None:
        assert creds.hash_password("password123") != creds.hash_password("password123")

    def test_verify_roundtrip(self, creds: BcryptJwtCredentials) -> None:
        password_hash = creds.hash_password("password123")

        assert creds.verify_password("password123", password_hash) is True
        assert creds.verify_password("password124", password_hash) is False

    def test_verify_without_hash_is_false(self, creds: BcryptJwtCredentials) -> None:
        """Missing hash still runs a comparison and never matches."""
        assert creds.verify_password("dummy_password_for_timing_safety", None) is False

    def test_long_password_accepted(self, creds: BcryptJwtCredentials) -> None:
        """Passwords over bcrypt's 72-byte limit hash and verify consistently."""
        password = "x" * 100
        password_hash = creds.hash_password(password)

        assert creds.verify_password(password, password_hash) is True


class TestTokens:
    def test_issue_and_decode(self, creds: BcryptJwtCredentials) -> None:
        token = creds.issue_token({"sub": "abc", "role": "student"})

        claims = creds.decode_token(token)

        assert claims["sub"] == "abc"
        assert claims["role"] == "student"
        assert "exp" in claims
        assert "iat" in claims

    def test_wrong_secret_rejected(self, creds: BcryptJwtCredentials) -> None:
        token = BcryptJwtCredentials(secret="other").issue_token({"sub": "abc"})

        assert creds.decode_token(token) is None

    def test_expired_token_rejected(self) -> None:
        creds = BcryptJwtCredentials(secret="s", expires_minutes=-1)

        assert creds.decode_token(creds.issue_token({"sub": "abc"})) is None

    def test_garbage_token_rejected(self, creds: BcryptJwtCredentials) -> None:
        assert creds.decode_token("not.a.token") is None

    def test_algorithm_is_enforced(self, creds: BcryptJwtCredentials) -> None:
        """Tokens signed with another algorithm are refused."""
        token = jwt.encode({"sub": "abc"}, "s3cret", algorithm="HS512")

        assert creds.decode_token(token) is None
