"""Versioned API router."""

from fastapi import APIRouter

from . import health, penalties, reservations, resources

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(resources.router, prefix="/resources", tags=["resources"])
router.include_router(
    reservations.router, prefix="/reservations", tags=["reservations"]
)
router.include_router(penalties.router, prefix="/penalties", tags=["penalties"])
