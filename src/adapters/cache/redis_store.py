"""
Redis verification store adapter - Implements VerificationStore protocol.

Session references live under ``verification:<email>`` with a server-side
expiry (``SET ... EX``). Expiry is enforced by Redis, so an expired
session and a never-issued one are both simply absent.
"""

import logging

from redis import Redis
from redis.exceptions import RedisError

from src.domain.exceptions import DependencyUnavailable

logger = logging.getLogger(__name__)


def create_redis_client(url: str, timeout_seconds: float) -> Redis:
    """
    Build a client with explicit socket timeouts and no automatic retries.

    Responses are decoded to str so get() returns the stored text.
    """
    return Redis.from_url(
        url,
        decode_responses=True,
        socket_timeout=timeout_seconds,
        socket_connect_timeout=timeout_seconds,
        retry_on_timeout=False,
    )


class RedisVerificationStore:
    """
    Implements VerificationStore protocol via redis-py.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, client: Redis) -> None:
        self._client = client

    def set_with_ttl(self, key: str, value: str, ttl_seconds: int) -> None:
        """Overwrite any previous session under key; expire after ttl_seconds."""
        try:
            self._client.set(key, value, ex=ttl_seconds)
        except RedisError as e:
            logger.error("Redis SET failed for %s: %s", key, e)
            raise DependencyUnavailable("verification store") from e

    def get(self, key: str) -> str | None:
        try:
            return self._client.get(key)
        except RedisError as e:
            logger.error("Redis GET failed for %s: %s", key, e)
            raise DependencyUnavailable("verification store") from e

    def delete(self, key: str) -> bool:
        """
        Remove key.

        DEL is atomic: of several concurrent callers, exactly one sees a
        count of 1.
        """
        try:
            return self._client.delete(key) == 1
        except RedisError as e:
            logger.error("Redis DEL failed for %s: %s", key, e)
            raise DependencyUnavailable("verification store") from e

    def ping(self) -> bool:
        try:
            return bool(self._client.ping())
        except RedisError as e:
            raise DependencyUnavailable("verification store") from e
