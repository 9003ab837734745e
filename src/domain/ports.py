"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the records the domain works with and the interfaces
(ports) it requires from infrastructure. Adapters implement these protocols.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Any, Protocol
from uuid import UUID


class VerificationState(str, Enum):
    """
    Whether possession of the mobile number has been proven.

    UNVERIFIED -> VERIFIED is the only transition, driven by a successful
    code validation. VERIFIED is terminal.
    """

    UNVERIFIED = "UNVERIFIED"
    VERIFIED = "VERIFIED"


class ApprovalState(str, Enum):
    """
    Administrator decision, independent of VerificationState.

    The administrator may set APPROVED or REJECTED at any time; login
    checks verification before approval.
    """

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class LoginStatus(str, Enum):
    """Named outcome of a login attempt whose credentials matched."""

    SUCCESS = "SUCCESS"
    NOT_VERIFIED = "NOT_VERIFIED"
    PENDING_ADMIN_APPROVAL = "PENDING_ADMIN_APPROVAL"
    REJECTED = "REJECTED"


@dataclass(frozen=True)
class AccountView:
    """Sanitized account projection - everything except the password hash."""

    id: UUID
    full_name: str
    email: str
    roll_number: str
    mobile_number: str | None
    verification_state: VerificationState
    approval_state: ApprovalState
    created_at: datetime | None
    updated_at: datetime | None


@dataclass(frozen=True)
class Account:
    """Durable student account record."""

    id: UUID
    full_name: str
    email: str
    roll_number: str
    mobile_number: str | None
    password_hash: str
    verification_state: VerificationState = VerificationState.UNVERIFIED
    approval_state: ApprovalState = ApprovalState.PENDING
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def public_view(self) -> AccountView:
        return AccountView(
            id=self.id,
            full_name=self.full_name,
            email=self.email,
            roll_number=self.roll_number,
            mobile_number=self.mobile_number,
            verification_state=self.verification_state,
            approval_state=self.approval_state,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    def with_changes(self, **changes: Any) -> "Account":
        return replace(self, **changes)


@dataclass(frozen=True)
class AdminView:
    id: UUID
    full_name: str
    email: str
    created_at: datetime | None


@dataclass(frozen=True)
class Admin:
    """The single administrator account."""

    id: UUID
    full_name: str
    email: str
    password_hash: str
    created_at: datetime | None = None

    def public_view(self) -> AdminView:
        return AdminView(
            id=self.id,
            full_name=self.full_name,
            email=self.email,
            created_at=self.created_at,
        )


@dataclass(frozen=True)
class VerificationOutcome:
    """
    Normalized answer from the provider's validate call.

    Only produced when the provider actually answered; transport and
    payload failures raise ProviderError instead.
    """

    valid: bool
    matched_rule: str | None = None


@dataclass(frozen=True)
class LoginResult:
    status: LoginStatus
    token: str
    profile: AccountView


class AccountRepository(Protocol):
    """Port interface for durable account persistence."""

    def create_unique(self, account: Account) -> Account | None:
        """
        Insert a new account.

        Returns:
            The stored account, or None if email or roll number is taken
            (unique constraint violation).
        """
        ...

    def find_by_email(self, email: str) -> Account | None: ...

    def find_by_roll_number(self, roll_number: str) -> Account | None: ...

    def find_by_id(self, account_id: UUID) -> Account | None: ...

    def update_by_email(self, email: str, **changes: Any) -> Account | None:
        """Apply field changes and bump updated_at. None if no such account."""
        ...

    def delete_by_id(self, account_id: UUID) -> None:
        """Delete an account. Deleting a missing id is a no-op."""
        ...

    def list_accounts(self) -> list[Account]:
        """All accounts, newest first."""
        ...

    def set_approval_state(self, account_id: UUID, state: ApprovalState) -> Account | None: ...


class AdminRepository(Protocol):
    """Port interface for the administrator record."""

    def create_admin(self, admin: Admin) -> Admin | None:
        """Insert the administrator. None if one already exists."""
        ...

    def exists(self) -> bool: ...

    def find_by_email(self, email: str) -> Admin | None: ...

    def find_by_id(self, admin_id: UUID) -> Admin | None: ...


class VerificationStore(Protocol):
    """Port interface for the ephemeral, expiring session store."""

    def set_with_ttl(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store value under key, replacing any previous value, expiring after ttl_seconds."""
        ...

    def get(self, key: str) -> str | None:
        """Return the live value, or None if missing or expired."""
        ...

    def delete(self, key: str) -> bool:
        """
        Remove the key.

        Returns:
            True only for the caller that actually removed a live entry.
        """
        ...


class VerificationProvider(Protocol):
    """Port interface for the one-time code delivery service."""

    def issue(self, mobile_number: str, country_code: str, channel: str) -> str:
        """
        Send a one-time code.

        Returns:
            Provider session reference

        Raises:
            ProviderError: call failed or no session reference was returned
        """
        ...

    def validate(
        self, mobile_number: str, session_ref: str, code: str, country_code: str
    ) -> VerificationOutcome:
        """
        Check a submitted code against an issued session.

        Raises:
            ProviderError: call failed, validity unknown
        """
        ...


class CredentialService(Protocol):
    """Port interface for password hashing and signed session tokens."""

    def hash_password(self, password: str) -> str: ...

    def verify_password(self, password: str, password_hash: str | None) -> bool:
        """
        Compare password against hash.

        A None hash must still cost one full comparison and return False.
        """
        ...

    def issue_token(self, claims: dict[str, Any]) -> str: ...

    def decode_token(self, token: str) -> dict[str, Any] | None:
        """Return the claims, or None for an invalid or expired token."""
        ...
