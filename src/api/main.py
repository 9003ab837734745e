"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures exception handlers and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.adapters.cache.redis_store import RedisVerificationStore, create_redis_client
from src.adapters.repository.postgres import create_pool, run_migrations
from src.adapters.security.credentials import BcryptJwtCredentials
from src.adapters.sms.console import ConsoleVerificationProvider
from src.adapters.sms.message_central import MessageCentralClient
from src.api.errors import to_http_exception
from src.api.v1 import router as v1_router
from src.config.settings import Settings, get_settings
from src.domain.exceptions import OnboardingError
from src.domain.ports import VerificationProvider

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "v1",
        "description": "Student onboarding - register, verify mobile number, log in",
    },
    {
        "name": "admin",
        "description": "Administrator review of student accounts",
    },
]


def build_provider(settings: Settings) -> VerificationProvider:
    """Select the verification provider adapter from settings."""
    if settings.sms_provider == "message_central":
        return MessageCentralClient.from_settings(
            base_url=settings.message_central_base_url,
            customer_id=settings.message_central_customer_id,
            auth_token=settings.message_central_auth_token,
            timeout_seconds=settings.provider_timeout_seconds,
        )
    logger.warning("Using console verification provider - codes are logged, not sent")
    return ConsoleVerificationProvider(ttl_seconds=settings.verification_ttl_seconds)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates database connection pool and runs migrations
    - Connects to redis
    - Builds the verification provider and credential service
    - Closes all clients on shutdown
    """
    settings = get_settings()
    logging.basicConfig(level=settings.log_level)

    logger.info("Starting application...")
    logger.info("Connecting to database...")

    pool = create_pool(
        conninfo=settings.database_url,
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
        connect_timeout=settings.db_connect_timeout_seconds,
        statement_timeout_ms=settings.db_statement_timeout_ms,
        pool_timeout=settings.db_pool_timeout_seconds,
    )

    logger.info("Running database migrations...")
    run_migrations(pool)

    logger.info("Connecting to redis...")
    redis_client = create_redis_client(settings.redis_url, settings.redis_timeout_seconds)

    provider = build_provider(settings)

    # Store long-lived clients in app state for dependency injection
    app.state.pool = pool
    app.state.redis = redis_client
    app.state.provider = provider
    app.state.credentials = BcryptJwtCredentials(
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expires_minutes=settings.jwt_expires_minutes,
        bcrypt_cost=settings.bcrypt_cost,
    )

    logger.info("Application startup complete")

    yield

    logger.info("Shutting down application...")
    if isinstance(provider, MessageCentralClient):
        provider.close()
    redis_client.close()
    pool.close()
    logger.info("Database connection pool closed")


app = FastAPI(
    title="student-onboarding",
    description="Student onboarding API - mobile verification and admin approval",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

app.include_router(v1_router, prefix="/v1")


@app.exception_handler(OnboardingError)
async def onboarding_error_handler(request: Request, exc: OnboardingError) -> JSONResponse:
    """Fallback for domain errors raised outside a route's own try block (e.g. dependencies)."""
    http_exc = to_http_exception(exc)
    return JSONResponse(status_code=http_exc.status_code, content={"detail": http_exc.detail})


@app.get("/health")
def health_check(request: Request) -> dict[str, str]:
    """
    Health check endpoint with database and redis validation.

    Returns 200 OK if application, database and redis are healthy.
    """
    pool = request.app.state.pool
    with pool.connection() as conn:
        conn.execute("SELECT 1")
    RedisVerificationStore(request.app.state.redis).ping()

    return {"status": "healthy"}
