"""
Credential adapter - Implements CredentialService protocol.

Password hashing with bcrypt and signed session tokens with PyJWT.

Timing Oracle Prevention:
-------------------------
verify_password() always runs one bcrypt comparison. When no stored hash
exists (unknown email) it compares against a pre-computed dummy hash, so
"no such account" and "wrong password" take the same time.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
import jwt

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes; newer releases reject longer input.
_BCRYPT_MAX_BYTES = 72

_DUMMY_PASSWORD = b"dummy_password_for_timing_safety"


def _password_bytes(password: str) -> bytes:
    return password.encode()[:_BCRYPT_MAX_BYTES]


class BcryptJwtCredentials:
    """
    Implements CredentialService protocol via bcrypt and PyJWT.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expires_minutes: int = 60 * 24 * 7,
        bcrypt_cost: int = 10,
    ) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self._expires = timedelta(minutes=expires_minutes)
        self._bcrypt_cost = bcrypt_cost
        # Dummy hash must share the configured cost.
        self._dummy_hash = bcrypt.hashpw(_DUMMY_PASSWORD, bcrypt.gensalt(rounds=bcrypt_cost))

    def hash_password(self, password: str) -> str:
        """Hash password using bcrypt with the configured cost factor."""
        return bcrypt.hashpw(
            _password_bytes(password), bcrypt.gensalt(rounds=self._bcrypt_cost)
        ).decode()

    def verify_password(self, password: str, password_hash: str | None) -> bool:
        """Constant-time comparison; a missing hash still costs one bcrypt run."""
        if password_hash is None:
            bcrypt.checkpw(_password_bytes(password), self._dummy_hash)
            return False
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode())

    def issue_token(self, claims: dict[str, Any]) -> str:
        """
        Sign claims with an expiry.

        Adds the standard ``iat`` and ``exp`` claims.
        """
        now = datetime.now(timezone.utc)
        payload = {**claims, "iat": now, "exp": now + self._expires}
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def decode_token(self, token: str) -> dict[str, Any] | None:
        try:
            return jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.InvalidTokenError as e:
            logger.info("Rejected token: %s", e)
            return None
