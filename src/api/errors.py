"""
Domain error to HTTP translation.

Routes catch OnboardingError and re-raise the HTTPException built here.
Lookup walks the exception's MRO, so subclasses without their own entry
inherit their parent's status.
"""

from fastapi import HTTPException, status

from src.domain.exceptions import (
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
    LoginBlocked,
    MissingPhoneNumber,
    OnboardingError,
    ValidationFailed,
    VerificationRequired,
)

_CONFLICT_MESSAGES = {
    "email": "Email already registered",
    "roll_number": "Roll number already registered",
}

_STATUS_MAP: dict[type[OnboardingError], tuple[int, str]] = {
    AccountConflict: (status.HTTP_409_CONFLICT, "Account already registered"),
    AdminAlreadyExists: (
        status.HTTP_409_CONFLICT,
        "Admin already exists. Only one admin account is allowed.",
    ),
    AccountNotFound: (status.HTTP_404_NOT_FOUND, "Student not found"),
    AlreadyVerified: (status.HTTP_409_CONFLICT, "Mobile number is already verified"),
    MissingPhoneNumber: (
        status.HTTP_409_CONFLICT,
        "Mobile number not found. Please register again.",
    ),
    ChallengeExpired: (
        status.HTTP_410_GONE,
        "OTP has expired or is invalid. Please register again.",
    ),
    InvalidCode: (status.HTTP_400_BAD_REQUEST, "Invalid OTP"),
    InvalidCredentials: (status.HTTP_401_UNAUTHORIZED, "Invalid email or password"),
    VerificationRequired: (status.HTTP_403_FORBIDDEN, "Please verify your mobile number first"),
    ApprovalPending: (status.HTTP_403_FORBIDDEN, "Your account is pending admin approval"),
    AccountRejected: (status.HTTP_403_FORBIDDEN, "Your account has been rejected"),
    DeliveryTimeout: (
        status.HTTP_504_GATEWAY_TIMEOUT,
        "Timed out sending OTP. Please try again.",
    ),
    DeliveryFailed: (status.HTTP_502_BAD_GATEWAY, "Failed to send OTP. Please try again."),
    DependencyUnavailable: (
        status.HTTP_503_SERVICE_UNAVAILABLE,
        "Service temporarily unavailable",
    ),
}


def to_http_exception(exc: OnboardingError) -> HTTPException:
    """Build the HTTPException for a domain error."""
    if isinstance(exc, ValidationFailed):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    for cls in type(exc).__mro__:
        if cls in _STATUS_MAP:
            status_code, message = _STATUS_MAP[cls]
            break
    else:
        status_code, message = status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error"

    if isinstance(exc, AccountConflict) and exc.field in _CONFLICT_MESSAGES:
        message = _CONFLICT_MESSAGES[exc.field]
    if isinstance(exc, LoginBlocked):
        return HTTPException(
            status_code=status_code, detail={"message": message, "status": exc.status.value}
        )
    return HTTPException(status_code=status_code, detail=message)
