"""
Shared test fixtures and configuration.

This module provides in-memory implementations of the domain ports so the
lifecycle engine can be exercised end to end without infrastructure:
- InMemoryAccountRepository: unique email / roll number, failure switches
- InMemoryVerificationStore: per-key TTL driven by a controllable clock
- FakeProvider: issues known codes, can fail or time out on demand
"""

import threading
from collections.abc import Callable
from typing import Any
from uuid import UUID

import pytest

from src.adapters.security.credentials import BcryptJwtCredentials
from src.domain.exceptions import DependencyUnavailable, ProviderError, ProviderTimeout
from src.domain.lifecycle import LifecycleConfig, LifecycleEngine
from src.domain.ports import Account, Admin, ApprovalState, VerificationOutcome


class FakeClock:
    def __init__(self) -> None:
        self.now = 1_000_000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class InMemoryAccountRepository:
    def __init__(self) -> None:
        self.accounts: dict[UUID, Account] = {}
        self.fail_delete = False
        self.fail_update = False
        self.skip_prechecks = False
        self._lock = threading.Lock()

    def create_unique(self, account: Account) -> Account | None:
        with self._lock:
            for existing in self.accounts.values():
                if existing.email == account.email or existing.roll_number == account.roll_number:
                    return None
            self.accounts[account.id] = account
            return account

    def find_by_email(self, email: str) -> Account | None:
        if self.skip_prechecks:
            return None
        return next((a for a in self.accounts.values() if a.email == email), None)

    def find_by_roll_number(self, roll_number: str) -> Account | None:
        if self.skip_prechecks:
            return None
        return next((a for a in self.accounts.values() if a.roll_number == roll_number), None)

    def find_by_id(self, account_id: UUID) -> Account | None:
        return self.accounts.get(account_id)

    def update_by_email(self, email: str, **changes: Any) -> Account | None:
        if self.fail_update:
            raise DependencyUnavailable("database")
        with self._lock:
            account = next((a for a in self.accounts.values() if a.email == email), None)
            if account is None:
                return None
            updated = account.with_changes(**changes)
            self.accounts[account.id] = updated
            return updated

    def delete_by_id(self, account_id: UUID) -> None:
        if self.fail_delete:
            raise DependencyUnavailable("database")
        self.accounts.pop(account_id, None)

    def list_accounts(self) -> list[Account]:
        return list(self.accounts.values())

    def set_approval_state(self, account_id: UUID, state: ApprovalState) -> Account | None:
        account = self.accounts.get(account_id)
        if account is None:
            return None
        updated = account.with_changes(approval_state=state)
        self.accounts[account_id] = updated
        return updated


class InMemoryAdminRepository:
    def __init__(self) -> None:
        self.admins: dict[UUID, Admin] = {}

    def create_admin(self, admin: Admin) -> Admin | None:
        if self.admins:
            return None
        self.admins[admin.id] = admin
        return admin

    def exists(self) -> bool:
        return bool(self.admins)

    def find_by_email(self, email: str) -> Admin | None:
        return next((a for a in self.admins.values() if a.email == email), None)

    def find_by_id(self, admin_id: UUID) -> Admin | None:
        return self.admins.get(admin_id)


class InMemoryVerificationStore:
    def __init__(self, clock: Callable[[], float]) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[str, float]] = {}
        self._lock = threading.Lock()
        self.fail_set = False
        self.last_ttl: int | None = None

    def set_with_ttl(self, key: str, value: str, ttl_seconds: int) -> None:
        if self.fail_set:
            raise DependencyUnavailable("verification store")
        self.last_ttl = ttl_seconds
        with self._lock:
            self._entries[key] = (value, self._clock() + ttl_seconds)

    def get(self, key: str) -> str | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or entry[1] <= self._clock():
                self._entries.pop(key, None)
                return None
            return entry[0]

    def delete(self, key: str) -> bool:
        with self._lock:
            entry = self._entries.pop(key, None)
            return entry is not None and entry[1] > self._clock()

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None


class FakeProvider:
    """Issues session refs whose correct code is always ``482913``."""

    CODE = "482913"

    def __init__(self) -> None:
        self.issued: list[tuple[str, str, str]] = []
        self.validated: list[tuple[str, str, str, str]] = []
        self.issue_error: ProviderError | None = None
        self.issue_ref: str | None = None
        self.validate_error: ProviderError | None = None

    def issue(self, mobile_number: str, country_code: str, channel: str) -> str:
        self.issued.append((mobile_number, country_code, channel))
        if self.issue_error is not None:
            raise self.issue_error
        if self.issue_ref is not None:
            return self.issue_ref
        return f"ref-{len(self.issued)}"

    def validate(
        self, mobile_number: str, session_ref: str, code: str, country_code: str
    ) -> VerificationOutcome:
        self.validated.append((mobile_number, session_ref, code, country_code))
        if self.validate_error is not None:
            raise self.validate_error
        valid = code == self.CODE
        return VerificationOutcome(valid=valid, matched_rule="fake" if valid else None)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def repository() -> InMemoryAccountRepository:
    return InMemoryAccountRepository()


@pytest.fixture
def admin_repository() -> InMemoryAdminRepository:
    return InMemoryAdminRepository()


@pytest.fixture
def store(clock: FakeClock) -> InMemoryVerificationStore:
    return InMemoryVerificationStore(clock)


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def credentials() -> BcryptJwtCredentials:
    # Minimum bcrypt cost keeps the suite fast.
    return BcryptJwtCredentials(secret="test-secret", bcrypt_cost=4)


@pytest.fixture
def engine(
    repository: InMemoryAccountRepository,
    store: InMemoryVerificationStore,
    provider: FakeProvider,
    credentials: BcryptJwtCredentials,
) -> LifecycleEngine:
    return LifecycleEngine(
        repository=repository,
        store=store,
        provider=provider,
        credentials=credentials,
        config=LifecycleConfig(),
    )


@pytest.fixture
def register_student(engine: LifecycleEngine) -> Callable[..., Any]:
    """Register with sensible defaults; keyword overrides per test."""

    def _register(**overrides: Any):
        fields = {
            "full_name": "Asha Rao",
            "email": "a@x.com",
            "roll_number": "R1",
            "password": "correct-horse",
            "mobile_number": "9000000001",
        }
        fields.update(overrides)
        return engine.register(**fields)

    return _register


@pytest.fixture
def timeout_error() -> ProviderTimeout:
    return ProviderTimeout("/send timed out")
