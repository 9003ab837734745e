"""Repository adapters - Database implementations."""

from .postgres import (
    PostgresAccountRepository,
    PostgresAdminRepository,
    create_pool,
    run_migrations,
)

__all__ = ["PostgresAccountRepository", "PostgresAdminRepository", "create_pool", "run_migrations"]
