"""
Console verification provider adapter - Implements VerificationProvider protocol.

This module provides a console-based implementation of the domain's
provider port, logging one-time codes instead of sending SMS, for local
development and demos.
"""

import logging
import secrets
import threading
import time
from collections.abc import Callable
from uuid import uuid4

from src.domain.ports import VerificationOutcome

logger = logging.getLogger(__name__)


class ConsoleVerificationProvider:
    """
    Implements VerificationProvider protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Issued codes are kept in memory, keyed by session reference, so this
    adapter only works within a single process. Codes older than
    ttl_seconds no longer validate and are pruned on the next issue.
    """

    def __init__(
        self,
        code_length: int = 4,
        ttl_seconds: int = 600,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._code_length = code_length
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._codes: dict[str, tuple[str, float]] = {}
        self._lock = threading.Lock()

    def issue(self, mobile_number: str, country_code: str, channel: str) -> str:
        """
        Log a fresh code to the console (simulates SMS delivery).

        The code is logged at INFO level to be visible in docker-compose logs.
        """
        code = self._generate_code()
        session_ref = uuid4().hex
        now = self._clock()
        with self._lock:
            self._prune(now)
            self._codes[session_ref] = (code, now)
        logger.info(
            "[VERIFICATION] Channel: %s Phone: +%s %s Code: %s",
            channel,
            country_code,
            mobile_number,
            code,
        )
        return session_ref

    def validate(
        self, mobile_number: str, session_ref: str, code: str, country_code: str
    ) -> VerificationOutcome:
        with self._lock:
            entry = self._codes.get(session_ref)
        valid = (
            entry is not None
            and not self._expired(entry[1], self._clock())
            and secrets.compare_digest(entry[0].encode(), code.encode())
        )
        if valid:
            with self._lock:
                self._codes.pop(session_ref, None)
        return VerificationOutcome(valid=valid, matched_rule="console" if valid else None)

    def pending_count(self) -> int:
        """Number of codes currently held, expired ones included until pruned."""
        with self._lock:
            return len(self._codes)

    def _prune(self, now: float) -> None:
        # Caller holds the lock.
        stale = [ref for ref, (_, issued_at) in self._codes.items() if self._expired(issued_at, now)]
        for ref in stale:
            del self._codes[ref]
        if stale:
            logger.debug("Pruned %d abandoned verification codes", len(stale))

    def _expired(self, issued_at: float, now: float) -> bool:
        return now - issued_at >= self._ttl_seconds

    def _generate_code(self) -> str:
        """
        Generate cryptographically secure numeric code.

        Returns string to preserve leading zeros.
        """
        return "".join(secrets.choice("0123456789") for _ in range(self._code_length))
