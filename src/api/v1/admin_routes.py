"""
API v1 admin routes.

Single-administrator endpoints for reviewing student accounts:
- POST  /v1/admin/register
- POST  /v1/admin/login
- GET   /v1/admin/students
- PATCH /v1/admin/students/{id}/approve
- PATCH /v1/admin/students/{id}/reject
- GET   /v1/admin/me
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status

from src.api.dependencies import get_current_admin, get_review_service
from src.api.errors import to_http_exception
from src.api.models import (
    AccountResponse,
    AdminLoginResponse,
    AdminRegisterRequest,
    AdminResponse,
    ErrorResponse,
    LoginRequest,
    StudentListResponse,
)
from src.domain.exceptions import OnboardingError
from src.domain.ports import AdminView
from src.domain.review import ReviewService

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post(
    "/register",
    response_model=AdminResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse, "description": "Admin already exists"}},
    summary="Register the administrator (only one allowed)",
)
def register_admin(
    request_data: AdminRegisterRequest,
    service: ReviewService = Depends(get_review_service),
) -> AdminResponse:
    try:
        admin = service.register_admin(
            request_data.full_name, request_data.email, request_data.password
        )
    except OnboardingError as exc:
        raise to_http_exception(exc) from None
    return AdminResponse.model_validate(admin)


@router.post(
    "/login",
    response_model=AdminLoginResponse,
    responses={401: {"model": ErrorResponse, "description": "Invalid email or password"}},
    summary="Administrator login",
)
def login_admin(
    request_data: LoginRequest,
    service: ReviewService = Depends(get_review_service),
) -> AdminLoginResponse:
    try:
        token = service.login_admin(request_data.email, request_data.password)
    except OnboardingError as exc:
        raise to_http_exception(exc) from None
    return AdminLoginResponse(message="Login successful", token=token)


@router.get("/students", response_model=StudentListResponse, summary="List all students")
def list_students(
    _admin: AdminView = Depends(get_current_admin),
    service: ReviewService = Depends(get_review_service),
) -> StudentListResponse:
    try:
        accounts = service.list_accounts()
    except OnboardingError as exc:
        raise to_http_exception(exc) from None
    return StudentListResponse(
        count=len(accounts),
        data=[AccountResponse.model_validate(account) for account in accounts],
    )


@router.patch(
    "/students/{account_id}/approve",
    response_model=AccountResponse,
    responses={404: {"model": ErrorResponse, "description": "Student not found"}},
    summary="Approve a student",
)
def approve_student(
    account_id: UUID,
    _admin: AdminView = Depends(get_current_admin),
    service: ReviewService = Depends(get_review_service),
) -> AccountResponse:
    try:
        account = service.approve(account_id)
    except OnboardingError as exc:
        raise to_http_exception(exc) from None
    return AccountResponse.model_validate(account)


@router.patch(
    "/students/{account_id}/reject",
    response_model=AccountResponse,
    responses={404: {"model": ErrorResponse, "description": "Student not found"}},
    summary="Reject a student",
)
def reject_student(
    account_id: UUID,
    _admin: AdminView = Depends(get_current_admin),
    service: ReviewService = Depends(get_review_service),
) -> AccountResponse:
    try:
        account = service.reject(account_id)
    except OnboardingError as exc:
        raise to_http_exception(exc) from None
    return AccountResponse.model_validate(account)


@router.get("/me", response_model=AdminResponse, summary="Current administrator")
def admin_me(admin: AdminView = Depends(get_current_admin)) -> AdminResponse:
    return AdminResponse.model_validate(admin)
