"""Ephemeral store adapters."""

from .redis_store import RedisVerificationStore, create_redis_client

__all__ = ["RedisVerificationStore", "create_redis_client"]
