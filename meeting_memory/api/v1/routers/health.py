"""Health check endpoints."""

from fastapi import APIRouter, Depends

from meeting_memory.api.v1.dependencies import get_store
from meeting_memory.api.v1.schemas import HealthStatus
from meeting_memory.config import settings
from meeting_memory.store import MeetingStore

router = APIRouter(prefix="/api/v1", tags=["health"])


@router.get("/health", response_model=HealthStatus)
async def health_check(store: MeetingStore = Depends(get_store)) -> HealthStatus:
    """Health check endpoint for load balancers and monitoring."""
    dependencies = {
        "openai": "configured" if settings.openai_api_key else "missing",
        "store": "healthy" if store.is_loaded else "not_loaded",
    }

    overall_status = (
        "healthy"
        if all(state in ("configured", "healthy") for state in dependencies.values())
        else "degraded"
    )

    return HealthStatus(
        status=overall_status,
        service="meeting-memory-api",
        version=settings.api_version,
        meetings=store.count() if store.is_loaded else 0,
        dependencies=dependencies,
        models={
            "transcription_model": settings.transcription_model,
            "summary_model": settings.summary_model,
            "extraction_model": settings.extraction_model,
            "embedding_model": settings.embedding_model,
            "image_model": settings.image_model,
        },
    )
