"""
Review service - Administrator account and approval decisions.

Plain CRUD over the account records. Approval is set unconditionally;
ordering against verification is enforced by LifecycleEngine.login().
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from uuid import UUID, uuid4

from .exceptions import AccountNotFound, AdminAlreadyExists, InvalidCredentials, ValidationFailed
from .lifecycle import normalize_email
from .ports import (
    AccountRepository,
    AccountView,
    Admin,
    AdminRepository,
    AdminView,
    ApprovalState,
    CredentialService,
)

logger = logging.getLogger(__name__)


@dataclass
class ReviewService:
    """Domain service for the single administrator."""

    accounts: AccountRepository
    admins: AdminRepository
    credentials: CredentialService

    def register_admin(self, full_name: str, email: str, password: str) -> AdminView:
        """
        Create the administrator account.

        Raises:
            ValidationFailed: Missing field
            AdminAlreadyExists: An administrator is already registered
        """
        if not full_name or not full_name.strip():
            raise ValidationFailed("full_name", "is required")
        if not email or not email.strip():
            raise ValidationFailed("email", "is required")
        if not password:
            raise ValidationFailed("password", "is required")

        if self.admins.exists():
            raise AdminAlreadyExists()

        admin = self.admins.create_admin(
            Admin(
                id=uuid4(),
                full_name=full_name.strip(),
                email=normalize_email(email),
                password_hash=self.credentials.hash_password(password),
                created_at=datetime.now(timezone.utc),
            )
        )
        # The singleton index decides when two registrations race.
        if admin is None:
            raise AdminAlreadyExists()
        logger.info("Administrator %s registered", admin.id)
        return admin.public_view()

    def login_admin(self, email: str, password: str) -> str:
        """Return a signed admin token. Raises InvalidCredentials on any mismatch."""
        admin = self.admins.find_by_email(normalize_email(email or ""))
        stored_hash = admin.password_hash if admin is not None else None
        if not self.credentials.verify_password(password or "", stored_hash) or admin is None:
            raise InvalidCredentials()
        logger.info("Administrator %s logged in", admin.id)
        return self.credentials.issue_token(
            {"sub": str(admin.id), "email": admin.email, "role": "admin"}
        )

    def get_admin(self, admin_id: UUID) -> AdminView | None:
        admin = self.admins.find_by_id(admin_id)
        return admin.public_view() if admin is not None else None

    def list_accounts(self) -> list[AccountView]:
        return [account.public_view() for account in self.accounts.list_accounts()]

    def approve(self, account_id: UUID) -> AccountView:
        return self._decide(account_id, ApprovalState.APPROVED)

    def reject(self, account_id: UUID) -> AccountView:
        return self._decide(account_id, ApprovalState.REJECTED)

    def _decide(self, account_id: UUID, state: ApprovalState) -> AccountView:
        account = self.accounts.set_approval_state(account_id, state)
        if account is None:
            raise AccountNotFound(str(account_id))
        logger.info("Account %s set to %s", account.id, state.value)
        return account.public_view()
