"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
Long-lived clients (pool, redis, provider, credentials) are created
during app lifespan and stored in app.state.
"""

from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from psycopg_pool import ConnectionPool

from src.adapters.cache.redis_store import RedisVerificationStore
from src.adapters.repository.postgres import PostgresAccountRepository, PostgresAdminRepository
from src.config.settings import get_settings
from src.domain.lifecycle import LifecycleConfig, LifecycleEngine
from src.domain.ports import AccountView, AdminView, CredentialService, VerificationProvider
from src.domain.review import ReviewService


def get_pool(request: Request) -> ConnectionPool:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.pool


def get_account_repository(request: Request) -> PostgresAccountRepository:
    """Create account repository with connection pool from app state."""
    return PostgresAccountRepository(get_pool(request))


def get_admin_repository(request: Request) -> PostgresAdminRepository:
    return PostgresAdminRepository(get_pool(request))


def get_verification_store(request: Request) -> RedisVerificationStore:
    return RedisVerificationStore(request.app.state.redis)


def get_provider(request: Request) -> VerificationProvider:
    return request.app.state.provider


def get_credentials(request: Request) -> CredentialService:
    return request.app.state.credentials


def get_lifecycle_config() -> LifecycleConfig:
    """Build the engine's constants from settings."""
    settings = get_settings()
    return LifecycleConfig(
        session_ttl_seconds=settings.verification_ttl_seconds,
        default_country_code=settings.default_country_code,
        channel=settings.otp_flow_type,
    )


def get_lifecycle_engine(request: Request) -> LifecycleEngine:
    """
    Create lifecycle engine with injected dependencies.

    Wires together the repository, verification store, provider and
    credential service for the domain service.
    """
    return LifecycleEngine(
        repository=get_account_repository(request),
        store=get_verification_store(request),
        provider=get_provider(request),
        credentials=get_credentials(request),
        config=get_lifecycle_config(),
    )


def get_review_service(request: Request) -> ReviewService:
    return ReviewService(
        accounts=get_account_repository(request),
        admins=get_admin_repository(request),
        credentials=get_credentials(request),
    )


# Bearer token security scheme for OpenAPI documentation
http_bearer = HTTPBearer(description="JWT issued by /v1/login or /v1/admin/login")


def _subject(
    request: Request, credentials: HTTPAuthorizationCredentials, role: str
) -> UUID:
    """Return the token's subject id, or 401 for any token that does not name one."""
    invalid = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
    )
    claims = get_credentials(request).decode_token(credentials.credentials)
    if claims is None or claims.get("role") != role or "sub" not in claims:
        raise invalid
    try:
        return UUID(str(claims["sub"]))
    except ValueError as exc:
        raise invalid from exc


def get_current_student(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(http_bearer),
    repository: PostgresAccountRepository = Depends(get_account_repository),
) -> AccountView:
    """Resolve the student behind a bearer token issued by /v1/login."""
    account = repository.find_by_id(_subject(request, credentials, "student"))
    if account is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")
    return account.public_view()


def get_current_admin(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(http_bearer),
    service: ReviewService = Depends(get_review_service),
) -> AdminView:
    """Resolve the administrator behind a bearer token issued by /v1/admin/login."""
    admin = service.get_admin(_subject(request, credentials, "admin"))
    if admin is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return admin
