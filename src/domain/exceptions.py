"""
Domain exceptions - Semantic error types for the onboarding lifecycle.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
Adapters translate driver and transport errors into these types.
"""

from .ports import LoginStatus


class OnboardingError(Exception):
    """Base class for onboarding domain errors."""

    pass


class ValidationFailed(OnboardingError):
    """Malformed or missing input. Raised before any side effect."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class AccountConflict(OnboardingError):
    """Email or roll number already belongs to an account."""

    def __init__(self, field: str | None = None) -> None:
        super().__init__(field or "identity")
        self.field = field


class AdminAlreadyExists(OnboardingError):
    """Only one administrator account may exist."""

    pass


class AccountNotFound(OnboardingError):
    """No account matches the given identity."""

    pass


class LifecycleStateError(OnboardingError):
    """Account is in the wrong lifecycle state for the requested transition."""

    pass


class AlreadyVerified(LifecycleStateError):
    """Mobile number was already verified; duplicate submissions are rejected."""

    pass


class MissingPhoneNumber(LifecycleStateError):
    """Account has no mobile number to verify against."""

    pass


class LoginBlocked(LifecycleStateError):
    """Credentials matched but the account may not log in yet."""

    status: LoginStatus


class VerificationRequired(LoginBlocked):
    status = LoginStatus.NOT_VERIFIED


class ApprovalPending(LoginBlocked):
    status = LoginStatus.PENDING_ADMIN_APPROVAL


class AccountRejected(LoginBlocked):
    status = LoginStatus.REJECTED


class InvalidCredentials(OnboardingError):
    """Unknown email or wrong password. Deliberately indistinguishable."""

    pass


class DeliveryFailed(OnboardingError):
    """The provider could not issue a one-time code."""

    pass


class DeliveryTimeout(DeliveryFailed):
    """The provider did not answer the issue request in time."""

    pass


class ChallengeExpired(OnboardingError):
    """No live verification session (expired, never issued, or already consumed)."""

    pass


class InvalidCode(OnboardingError):
    """
    The submitted code could not be accepted.

    ``confirmed`` is True when the provider answered that the code is wrong,
    False when the provider call failed and validity is unknown.
    """

    def __init__(self, email: str, confirmed: bool) -> None:
        super().__init__(email)
        self.confirmed = confirmed


class DependencyUnavailable(OnboardingError):
    """A store was unreachable or timed out."""

    pass


class ProviderError(OnboardingError):
    """
    The verification provider call failed (HTTP error, transport error,
    malformed body). Never means "the code is wrong".
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ProviderTimeout(ProviderError):
    """The verification provider did not answer within the configured timeout."""

    pass
