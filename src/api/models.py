"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from src.domain.ports import ApprovalState, LoginStatus, VerificationState


class RegisterRequest(BaseModel):
    """Request model for student registration."""

    full_name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    roll_number: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=8, description="User password (min 8 characters)")
    mobile_number: str = Field(
        ...,
        pattern=r"^[0-9]{6,15}$",
        description="Mobile number without dialing code",
    )
    country_code: str | None = Field(
        default=None,
        pattern=r"^\+?[0-9]{1,4}$",
        description="Dialing code, defaults to the configured country",
    )


class AccountResponse(BaseModel):
    """Sanitized account - never includes the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    full_name: str
    email: str
    roll_number: str
    mobile_number: str | None
    verification_state: VerificationState
    approval_state: ApprovalState
    created_at: datetime | None
    updated_at: datetime | None


class RegisterResponse(BaseModel):
    """Response model for successful registration."""

    message: str
    data: AccountResponse
    expires_in_seconds: int


class VerifyOtpRequest(BaseModel):
    """Request model for code validation. Code shape is checked by the domain."""

    email: EmailStr
    otp: str = Field(..., min_length=1, max_length=16, description="4-6 digit code")
    country_code: str | None = Field(default=None, pattern=r"^\+?[0-9]{1,4}$")


class VerifyOtpResponse(BaseModel):
    message: str
    email: str


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class LoginProfile(BaseModel):
    """Minimal profile returned on login."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    full_name: str
    email: str
    roll_number: str
    approval_state: ApprovalState


class LoginResponse(BaseModel):
    message: str
    status: LoginStatus
    token: str
    user: LoginProfile


class AdminRegisterRequest(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    password: str = Field(..., min_length=8)


class AdminResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    full_name: str
    email: str
    created_at: datetime | None


class AdminLoginResponse(BaseModel):
    message: str
    token: str


class StudentListResponse(BaseModel):
    count: int
    data: list[AccountResponse]


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str


class LoginBlockedDetail(BaseModel):
    message: str
    status: LoginStatus


class LoginBlockedResponse(BaseModel):
    """Credentials matched but the account may not log in yet."""

    detail: LoginBlockedDetail
