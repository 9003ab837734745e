"""
API v1 routes.

Defines the student-facing REST endpoints:
- POST /v1/register    - Create account and send OTP
- POST /v1/verify-otp  - Validate OTP, mark mobile number verified
- POST /v1/login       - Issue a session token once verified and approved
- GET  /v1/me          - Current student from bearer token
"""

from fastapi import APIRouter, Depends, status

from src.api.dependencies import get_current_student, get_lifecycle_engine
from src.api.errors import to_http_exception
from src.api.models import (
    AccountResponse,
    ErrorResponse,
    LoginBlockedResponse,
    LoginProfile,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    VerifyOtpRequest,
    VerifyOtpResponse,
)
from src.domain.exceptions import OnboardingError
from src.domain.lifecycle import LifecycleEngine
from src.domain.ports import AccountView

router = APIRouter(tags=["v1"])


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Missing or malformed field"},
        409: {"model": ErrorResponse, "description": "Email or roll number already registered"},
        502: {"model": ErrorResponse, "description": "OTP could not be sent"},
        504: {"model": ErrorResponse, "description": "OTP provider timed out"},
        422: {"description": "Validation error"},
    },
    summary="Register a new student",
    description="Create a student account and send a one-time code to the mobile number. "
    "If the code cannot be sent, no account is kept.",
)
def register(
    request_data: RegisterRequest,
    engine: LifecycleEngine = Depends(get_lifecycle_engine),
) -> RegisterResponse:
    """
    Register a new student and send an OTP.

    - **mobile_number**: the only verification channel
    - **country_code**: optional dialing code
    """
    try:
        account = engine.register(
            full_name=request_data.full_name,
            email=request_data.email,
            roll_number=request_data.roll_number,
            password=request_data.password,
            mobile_number=request_data.mobile_number,
            country_code=request_data.country_code,
        )
    except OnboardingError as exc:
        raise to_http_exception(exc) from None
    return RegisterResponse(
        message="Registration successful. Please verify your mobile number with the OTP.",
        data=AccountResponse.model_validate(account),
        expires_in_seconds=engine.config.session_ttl_seconds,
    )


@router.post(
    "/verify-otp",
    response_model=VerifyOtpResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Malformed or invalid OTP"},
        404: {"model": ErrorResponse, "description": "Student not found"},
        409: {"model": ErrorResponse, "description": "Already verified"},
        410: {"model": ErrorResponse, "description": "OTP expired, register again"},
    },
    summary="Verify mobile number with OTP",
)
def verify_otp(
    request_data: VerifyOtpRequest,
    engine: LifecycleEngine = Depends(get_lifecycle_engine),
) -> VerifyOtpResponse:
    try:
        account = engine.validate_code(
            request_data.email, request_data.otp, request_data.country_code
        )
    except OnboardingError as exc:
        raise to_http_exception(exc) from None
    return VerifyOtpResponse(
        message="Mobile number verified successfully. Waiting for admin approval.",
        email=account.email,
    )


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid email or password"},
        403: {"model": LoginBlockedResponse, "description": "Not verified, pending or rejected"},
    },
    summary="Log in a student",
    description="Unknown email and wrong password return the same error.",
)
def login(
    request_data: LoginRequest,
    engine: LifecycleEngine = Depends(get_lifecycle_engine),
) -> LoginResponse:
    try:
        result = engine.login(request_data.email, request_data.password)
    except OnboardingError as exc:
        raise to_http_exception(exc) from None
    return LoginResponse(
        message="Login successful",
        status=result.status,
        token=result.token,
        user=LoginProfile.model_validate(result.profile),
    )


@router.get(
    "/me",
    response_model=AccountResponse,
    responses={401: {"model": ErrorResponse, "description": "Invalid or expired token"}},
    summary="Current student",
)
def me(account: AccountView = Depends(get_current_student)) -> AccountResponse:
    return AccountResponse.model_validate(account)
