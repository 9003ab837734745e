"""
API v1 package.

Contains versioned API routes for the student onboarding API.
"""

from fastapi import APIRouter

from src.api.v1.admin_routes import router as admin_router
from src.api.v1.routes import router as student_router

router = APIRouter()
router.include_router(student_router)
router.include_router(admin_router)

__all__ = ["admin_router", "router", "student_router"]
