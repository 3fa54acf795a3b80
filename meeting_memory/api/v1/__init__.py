"""API v1 - combined router."""

from fastapi import APIRouter

from meeting_memory.api.v1.routers import (
    health_router,
    meetings_router,
    search_router,
)

router = APIRouter()
router.include_router(health_router)
router.include_router(meetings_router)
router.include_router(search_router)

__all__ = ["router"]
