"""
Domain layer - Pure business logic with zero framework imports.

This package contains the account lifecycle state machine for student
onboarding. It defines its own port interfaces for infrastructure
abstraction, ensuring true hexagonal architecture decoupling.
"""

from .exceptions import (
    AccountConflict,
    AccountNotFound,
    AccountRejected,
    AdminAlreadyExists,
    AlreadyVerified,
    ApprovalPending,
    ChallengeExpired,
    DeliveryFailed,
    DeliveryTimeout,
    DependencyUnavailable,
    InvalidCode,
    InvalidCredentials,
    LifecycleStateError,
    LoginBlocked,
    MissingPhoneNumber,
    OnboardingError,
    ProviderError,
    ProviderTimeout,
    ValidationFailed,
    VerificationRequired,
)
from .lifecycle import LifecycleConfig, LifecycleEngine
from .ports import (
    Account,
    AccountRepository,
    AccountView,
    Admin,
    AdminRepository,
    AdminView,
    ApprovalState,
    CredentialService,
    LoginResult,
    LoginStatus,
    VerificationOutcome,
    VerificationProvider,
    VerificationState,
    VerificationStore,
)
from .review import ReviewService

__all__ = [
    "Account",
    "AccountConflict",
    "AccountNotFound",
    "AccountRejected",
    "AccountRepository",
    "AccountView",
    "Admin",
    "AdminAlreadyExists",
    "AdminRepository",
    "AdminView",
    "AlreadyVerified",
    "ApprovalPending",
    "ApprovalState",
    "ChallengeExpired",
    "CredentialService",
    "DeliveryFailed",
    "DeliveryTimeout",
    "DependencyUnavailable",
    "InvalidCode",
    "InvalidCredentials",
    "LifecycleConfig",
    "LifecycleEngine",
    "LifecycleStateError",
    "LoginBlocked",
    "LoginResult",
    "LoginStatus",
    "MissingPhoneNumber",
    "OnboardingError",
    "ProviderError",
    "ProviderTimeout",
    "ReviewService",
    "ValidationFailed",
    "VerificationOutcome",
    "VerificationProvider",
    "VerificationRequired",
    "VerificationState",
    "VerificationStore",
]
