"""
Lifecycle engine - Account state machine and out-of-band verification.

This module contains the core business logic for student onboarding:
registration, mobile number verification through a provider-issued
one-time code, and login eligibility.

Account Lifecycle
=================

Two independent axes:

    verification_state:  UNVERIFIED -> VERIFIED      (code validation)
    approval_state:      PENDING -> APPROVED | REJECTED  (administrator)

Registration saga:

    1. pre-checks (no side effects)
    2. create account UNVERIFIED/PENDING     <- durability boundary
    3. provider.issue()
    4. on failure: delete account (compensation), raise DeliveryFailed
    5. on success: store session ref with TTL (failure here is degraded, not fatal)

Registering again with the same email, roll number and password while the
account is UNVERIFIED and has no live session re-runs steps 3 and 5 for the
existing account, overwriting the session key. A failed re-issue leaves the account
in place.

Code validation consumes the session before flipping the account, so a
session reference can verify at most one account once. Concurrent
validations race on the store delete; only the caller that removed the
key proceeds.

Login checks, in fixed order: credentials, verification, pending, rejected.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import uuid4

from .exceptions import (
    AccountConflict,
    AccountNotFound,
    AccountRejected,
    AlreadyVerified,
    ApprovalPending,
    ChallengeExpired,
    DeliveryFailed,
    DeliveryTimeout,
    DependencyUnavailable,
    InvalidCode,
    InvalidCredentials,
    MissingPhoneNumber,
    ProviderError,
    ProviderTimeout,
    ValidationFailed,
    VerificationRequired,
)
from .ports import (
    Account,
    AccountRepository,
    AccountView,
    ApprovalState,
    CredentialService,
    LoginResult,
    LoginStatus,
    VerificationProvider,
    VerificationState,
    VerificationStore,
)

logger = logging.getLogger(__name__)

_CODE_PATTERN = re.compile(r"[0-9]{4,6}")
_COUNTRY_CODE_PATTERN = re.compile(r"[0-9]{1,4}")


@dataclass(frozen=True)
class LifecycleConfig:
    """Constants injected at construction time."""

    session_ttl_seconds: int = 600
    session_key_prefix: str = "verification:"
    default_country_code: str = "91"
    channel: str = "SMS"


def normalize_email(email: str) -> str:
    """
    Normalize email address for consistent storage and lookup.

    Applies: strip whitespace + lowercase
    """
    return email.strip().lower()


@dataclass
class LifecycleEngine:
    """
    Domain service owning the account state transitions.

    Sequences the account repository, the verification store and the
    provider; all three are injected ports.
    """

    repository: AccountRepository
    store: VerificationStore
    provider: VerificationProvider
    credentials: CredentialService
    config: LifecycleConfig = field(default_factory=LifecycleConfig)

    def register(
        self,
        full_name: str,
        email: str,
        roll_number: str,
        password: str,
        mobile_number: str,
        country_code: str | None = None,
    ) -> AccountView:
        """
        Create an account and send a one-time code to its mobile number.

        Repeating the registration of an unverified account whose session
        is gone sends a fresh code to the stored number instead of raising
        a conflict.

        Args:
            full_name: Display name
            email: Identity key (will be normalized)
            roll_number: Secondary unique id
            password: Plaintext password (will be hashed)
            mobile_number: The only verification channel
            country_code: Dialing code, defaults to config.default_country_code

        Returns:
            Sanitized view of the created (or re-issued) account

        Raises:
            ValidationFailed: Missing field or malformed dialing code
            AccountConflict: Email or roll number already registered
            DeliveryFailed: Provider could not issue a code (new account removed)
            DeliveryTimeout: Provider timed out (new account removed)
        """
        full_name = self._require("full_name", full_name)
        email = normalize_email(self._require("email", email))
        roll_number = self._require("roll_number", roll_number)
        mobile_number = self._require("mobile_number", mobile_number)
        if not password:
            raise ValidationFailed("password", "is required")
        dial_code = self._dial_code(country_code)

        # Pre-checks only give a precise message; the unique constraint decides.
        existing = self.repository.find_by_email(email)
        if existing is not None:
            if self._may_reissue(existing, roll_number, password):
                return self._reissue(existing, dial_code)
            raise AccountConflict("email")
        if self.repository.find_by_roll_number(roll_number) is not None:
            raise AccountConflict("roll_number")

        now = datetime.now(timezone.utc)
        account = self.repository.create_unique(
            Account(
                id=uuid4(),
                full_name=full_name,
                email=email,
                roll_number=roll_number,
                mobile_number=mobile_number,
                password_hash=self.credentials.hash_password(password),
                created_at=now,
                updated_at=now,
            )
        )
        if account is None:
            logger.info("Registration lost unique race for %s", email)
            raise AccountConflict()
        logger.info("Account %s created, requesting code", account.id)

        try:
            session_ref = self._issue(account, dial_code)
        except DeliveryFailed:
            self._discard_account(account)
            raise

        self._store_session(account, session_ref)
        return account.public_view()

    def validate_code(
        self, email: str, code: str, country_code: str | None = None
    ) -> AccountView:
        """
        Validate a submitted code and mark the account VERIFIED.

        Args:
            email: Identity key (will be normalized)
            code: 4 to 6 ASCII digits
            country_code: Dialing code, defaults to config.default_country_code

        Returns:
            Sanitized view of the verified account

        Raises:
            ValidationFailed: Malformed code or email (no network call made)
            AccountNotFound: No account for email
            AlreadyVerified: Account is already VERIFIED
            MissingPhoneNumber: No mobile number on file
            ChallengeExpired: No live session, or a concurrent request consumed it
            InvalidCode: Provider rejected the code or could not be reached
        """
        email = normalize_email(self._require("email", email))
        code = (code or "").strip()
        if not _CODE_PATTERN.fullmatch(code):
            raise ValidationFailed("code", "must be 4-6 digits")
        dial_code = self._dial_code(country_code)

        account = self.repository.find_by_email(email)
        if account is None:
            raise AccountNotFound(email)
        if account.verification_state == VerificationState.VERIFIED:
            raise AlreadyVerified(email)
        if not account.mobile_number:
            raise MissingPhoneNumber(email)

        key = self.session_key(email)
        session_ref = self.store.get(key)
        if session_ref is None:
            raise ChallengeExpired(email)

        try:
            outcome = self.provider.validate(account.mobile_number, session_ref, code, dial_code)
        except ProviderError as exc:
            logger.error("Code validation unconfirmed for account %s: %s", account.id, exc)
            raise InvalidCode(email, confirmed=False) from exc

        if not outcome.valid:
            logger.info("Provider rejected code for account %s", account.id)
            raise InvalidCode(email, confirmed=True)

        if not self.store.delete(key):
            logger.warning("Session for account %s consumed by a concurrent request", account.id)
            raise ChallengeExpired(email)

        verified = self.repository.update_by_email(
            email, verification_state=VerificationState.VERIFIED
        )
        if verified is None:
            raise AccountNotFound(email)
        logger.info("Account %s verified (rule=%s)", verified.id, outcome.matched_rule)
        return verified.public_view()

    def login(self, email: str, password: str) -> LoginResult:
        """
        Authenticate and issue a signed session token.

        Raises:
            ValidationFailed: Missing email or password
            InvalidCredentials: Unknown email or wrong password
            VerificationRequired: Mobile number not verified yet
            ApprovalPending: Administrator has not decided
            AccountRejected: Administrator rejected the account
        """
        email = normalize_email(self._require("email", email))
        if not password:
            raise ValidationFailed("password", "is required")

        account = self.repository.find_by_email(email)
        # Always run one hash comparison so unknown emails cost the same.
        stored_hash = account.password_hash if account is not None else None
        if not self.credentials.verify_password(password, stored_hash) or account is None:
            raise InvalidCredentials()

        if account.verification_state != VerificationState.VERIFIED:
            raise VerificationRequired(email)
        if account.approval_state == ApprovalState.PENDING:
            raise ApprovalPending(email)
        if account.approval_state == ApprovalState.REJECTED:
            raise AccountRejected(email)

        token = self.credentials.issue_token(
            {
                "sub": str(account.id),
                "email": account.email,
                "roll_number": account.roll_number,
                "role": "student",
            }
        )
        logger.info("Account %s logged in", account.id)
        return LoginResult(status=LoginStatus.SUCCESS, token=token, profile=account.public_view())

    def session_key(self, email: str) -> str:
        return f"{self.config.session_key_prefix}{normalize_email(email)}"

    def _may_reissue(self, account: Account, roll_number: str, password: str) -> bool:
        """
        A repeated registration may request a fresh code when it names the
        same unverified account with its password while no session is live.
        """
        if account.verification_state != VerificationState.UNVERIFIED:
            return False
        if account.roll_number != roll_number or not account.mobile_number:
            return False
        if self.store.get(self.session_key(account.email)) is not None:
            return False
        return self.credentials.verify_password(password, account.password_hash)

    def _reissue(self, account: Account, dial_code: str) -> AccountView:
        """Send a new code for an existing account. The account row is left unchanged."""
        logger.info("Account %s has no live session, requesting a fresh code", account.id)
        session_ref = self._issue(account, dial_code)
        self._store_session(account, session_ref)
        return account.public_view()

    def _issue(self, account: Account, dial_code: str) -> str:
        """Ask the provider for a code. Raises DeliveryFailed or DeliveryTimeout."""
        try:
            session_ref = self.provider.issue(account.mobile_number, dial_code, self.config.channel)
        except ProviderError as exc:
            logger.error("Code issuance failed for account %s: %s", account.id, exc)
            if isinstance(exc, ProviderTimeout):
                raise DeliveryTimeout(account.email) from exc
            raise DeliveryFailed(account.email) from exc
        if not session_ref:
            logger.error("Provider returned no session reference for account %s", account.id)
            raise DeliveryFailed(account.email)
        return session_ref

    def _store_session(self, account: Account, session_ref: str) -> None:
        """Overwrite any previous session. A store outage is logged, not raised."""
        try:
            self.store.set_with_ttl(
                self.session_key(account.email), session_ref, self.config.session_ttl_seconds
            )
        except DependencyUnavailable:
            logger.warning(
                "DEGRADED: account %s registered but session was not stored; "
                "code validation will report an expired challenge",
                account.id,
            )

    def _discard_account(self, account: Account) -> None:
        """Compensating delete. Its own failure is logged, never raised."""
        try:
            self.repository.delete_by_id(account.id)
        except Exception:
            logger.exception("Compensating delete failed for account %s", account.id)
        else:
            logger.info("Account %s removed after failed issuance", account.id)

    def _dial_code(self, country_code: str | None) -> str:
        if country_code is None or not country_code.strip():
            return self.config.default_country_code
        dial_code = country_code.strip().lstrip("+")
        if not _COUNTRY_CODE_PATTERN.fullmatch(dial_code):
            raise ValidationFailed("country_code", "must be 1-4 digits")
        return dial_code

    @staticmethod
    def _require(name: str, value: str | None) -> str:
        if value is None or not value.strip():
            raise ValidationFailed(name, "is required")
        return value.strip()
