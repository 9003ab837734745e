"""
Shared fixtures for integration tests.

Requires PostgreSQL and Redis to be running (via docker-compose).
"""

from collections.abc import Generator

import pytest
from psycopg_pool import ConnectionPool
from redis import Redis

from src.adapters.cache.redis_store import create_redis_client
from src.adapters.repository.postgres import create_pool, run_migrations
from src.config.settings import get_settings


@pytest.fixture(scope="module")
def pool() -> Generator[ConnectionPool, None, None]:
    """Create connection pool and apply migrations."""
    settings = get_settings()
    pool = create_pool(
        conninfo=settings.database_url,
        min_size=1,
        max_size=10,
        connect_timeout=settings.db_connect_timeout_seconds,
        statement_timeout_ms=settings.db_statement_timeout_ms,
        pool_timeout=settings.db_pool_timeout_seconds,
    )
    run_migrations(pool)
    yield pool
    pool.close()


@pytest.fixture(scope="module")
def redis_client() -> Generator[Redis, None, None]:
    settings = get_settings()
    client = create_redis_client(settings.redis_url, settings.redis_timeout_seconds)
    yield client
    client.close()


