"""API v1 routers."""

from meeting_memory.api.v1.routers.health import router as health_router
from meeting_memory.api.v1.routers.meetings import router as meetings_router
from meeting_memory.api.v1.routers.search import router as search_router

__all__ = ["health_router", "meetings_router", "search_router"]
