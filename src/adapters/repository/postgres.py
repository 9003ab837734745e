"""
PostgreSQL repository adapters - Implement AccountRepository and AdminRepository.

This module provides the PostgreSQL implementation of the domain's
persistence ports using psycopg3 with raw SQL.

Uniqueness Design:
------------------
Email and roll number uniqueness (and the single-admin rule) are enforced
by UNIQUE constraints in the schema. Inserts use ``ON CONFLICT DO NOTHING
RETURNING``: a conflict yields no row and the adapter returns None, so
concurrent registrations for the same identity resolve in the database,
not in application locks.

Timeouts:
---------
Every call is bounded: the pool's checkout timeout, the connection's
``connect_timeout`` and the server-side ``statement_timeout`` (set via
connection options in ``create_pool``). Connection-level failures are
translated into DependencyUnavailable.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Any
from uuid import UUID

import psycopg
from psycopg import sql
from psycopg_pool import ConnectionPool

from src.domain.exceptions import DependencyUnavailable
from src.domain.ports import Account, Admin, ApprovalState, VerificationState

logger = logging.getLogger(__name__)

_ACCOUNT_COLUMNS = (
    "id, full_name, email, roll_number, mobile_number, password_hash, "
    "verification_state, approval_state, created_at, updated_at"
)
_ADMIN_COLUMNS = "id, full_name, email, password_hash, created_at"

# Columns update_by_email() may touch; anything else is a programming error.
_UPDATABLE_COLUMNS = frozenset(
    {"full_name", "mobile_number", "password_hash", "verification_state", "approval_state"}
)


def create_pool(
    conninfo: str,
    min_size: int,
    max_size: int,
    connect_timeout: int,
    statement_timeout_ms: int,
    pool_timeout: float,
) -> ConnectionPool:
    """Create a connection pool whose connections all carry explicit timeouts."""
    return ConnectionPool(
        conninfo=conninfo,
        min_size=min_size,
        max_size=max_size,
        timeout=pool_timeout,
        kwargs={
            "connect_timeout": connect_timeout,
            "options": f"-c statement_timeout={statement_timeout_ms}",
        },
        open=True,
    )


def _account_from_row(row: tuple) -> Account:
    return Account(
        id=row[0],
        full_name=row[1],
        email=row[2],
        roll_number=row[3],
        mobile_number=row[4],
        password_hash=row[5],
        verification_state=VerificationState(row[6]),
        approval_state=ApprovalState(row[7]),
        created_at=row[8],
        updated_at=row[9],
    )


def _admin_from_row(row: tuple) -> Admin:
    return Admin(id=row[0], full_name=row[1], email=row[2], password_hash=row[3], created_at=row[4])


class _PooledRepository:
    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    @contextmanager
    def _connection(self) -> Iterator[psycopg.Connection]:
        # PoolTimeout is an OperationalError subclass.
        try:
            with self._pool.connection() as conn:
                yield conn
        except psycopg.OperationalError as e:
            logger.error("Database unavailable: %s", e)
            raise DependencyUnavailable("database") from e

    def _fetch_one(self, query: Any, params: tuple) -> tuple | None:
        with self._connection() as conn, conn.cursor() as cursor:
            cursor.execute(query, params)
            row = cursor.fetchone()
            conn.commit()
            return row


class PostgresAccountRepository(_PooledRepository):
    """
    Implements AccountRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def create_unique(self, account: Account) -> Account | None:
        """
        Insert a new account, relying on UNIQUE(email) and UNIQUE(roll_number).

        Returns:
            The stored account, or None if either key is already taken
        """
        query = f"""
            INSERT INTO accounts (id, full_name, email, roll_number, mobile_number,
                                  password_hash, verification_state, approval_state,
                                  created_at, updated_at)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, NOW(), NOW())
            ON CONFLICT DO NOTHING
            RETURNING {_ACCOUNT_COLUMNS}
        """
        row = self._fetch_one(
            query,
            (
                account.id,
                account.full_name,
                account.email,
                account.roll_number,
                account.mobile_number,
                account.password_hash,
                account.verification_state.value,
                account.approval_state.value,
            ),
        )
        return _account_from_row(row) if row is not None else None

    def find_by_email(self, email: str) -> Account | None:
        row = self._fetch_one(
            f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE email = %s", (email,)
        )
        return _account_from_row(row) if row is not None else None

    def find_by_roll_number(self, roll_number: str) -> Account | None:
        row = self._fetch_one(
            f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE roll_number = %s", (roll_number,)
        )
        return _account_from_row(row) if row is not None else None

    def find_by_id(self, account_id: UUID) -> Account | None:
        row = self._fetch_one(
            f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE id = %s", (account_id,)
        )
        return _account_from_row(row) if row is not None else None

    def update_by_email(self, email: str, **changes: Any) -> Account | None:
        """
        Apply column changes to the account with the given email.

        Enum values are stored by value. updated_at is always bumped.
        """
        unknown = set(changes) - _UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Cannot update columns: {sorted(unknown)}")
        if not changes:
            return self.find_by_email(email)

        assignments = sql.SQL(", ").join(
            sql.SQL("{} = %s").format(sql.Identifier(column)) for column in changes
        )
        query = sql.SQL(
            "UPDATE accounts SET {}, updated_at = NOW() WHERE email = %s RETURNING "
            + _ACCOUNT_COLUMNS
        ).format(assignments)
        values = tuple(v.value if isinstance(v, Enum) else v for v in changes.values())
        row = self._fetch_one(query, (*values, email))
        return _account_from_row(row) if row is not None else None

    def delete_by_id(self, account_id: UUID) -> None:
        """Delete the account. Idempotent - a missing id is not an error."""
        with self._connection() as conn:
            conn.execute("DELETE FROM accounts WHERE id = %s", (account_id,))
            conn.commit()

    def list_accounts(self) -> list[Account]:
        with self._connection() as conn, conn.cursor() as cursor:
            cursor.execute(f"SELECT {_ACCOUNT_COLUMNS} FROM accounts ORDER BY created_at DESC")
            rows = cursor.fetchall()
            conn.commit()
        return [_account_from_row(row) for row in rows]

    def set_approval_state(self, account_id: UUID, state: ApprovalState) -> Account | None:
        query = f"""
            UPDATE accounts
            SET approval_state = %s, updated_at = NOW()
            WHERE id = %s
            RETURNING {_ACCOUNT_COLUMNS}
        """
        row = self._fetch_one(query, (state.value, account_id))
        return _account_from_row(row) if row is not None else None


class PostgresAdminRepository(_PooledRepository):
    """Implements AdminRepository protocol via psycopg3."""

    def create_admin(self, admin: Admin) -> Admin | None:
        """
        Insert the administrator.

        The singleton index on ``admins ((TRUE))`` makes any second insert
        conflict, so this returns None once an administrator exists.
        """
        query = f"""
            INSERT INTO admins (id, full_name, email, password_hash, created_at)
            VALUES (%s, %s, %s, %s, NOW())
            ON CONFLICT DO NOTHING
            RETURNING {_ADMIN_COLUMNS}
        """
        row = self._fetch_one(query, (admin.id, admin.full_name, admin.email, admin.password_hash))
        return _admin_from_row(row) if row is not None else None

    def exists(self) -> bool:
        return self._fetch_one("SELECT 1 FROM admins LIMIT 1", ()) is not None

    def find_by_email(self, email: str) -> Admin | None:
        row = self._fetch_one(f"SELECT {_ADMIN_COLUMNS} FROM admins WHERE email = %s", (email,))
        return _admin_from_row(row) if row is not None else None

    def find_by_id(self, admin_id: UUID) -> Admin | None:
        row = self._fetch_one(f"SELECT {_ADMIN_COLUMNS} FROM admins WHERE id = %s", (admin_id,))
        return _admin_from_row(row) if row is not None else None


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: src/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning(f"Migrations directory not found: {migrations_dir}")
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info(f"Running {len(sql_files)} migration(s)")

    for sql_file in sql_files:
        logger.info(f"Executing migration: {sql_file.name}")
        try:
            with pool.connection() as conn:
                conn.execute(sql_file.read_text())

            logger.info(f"Migration complete: {sql_file.name}")
        except Exception as e:
            logger.error(f"Migration failed: {sql_file.name} - {e}")
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
