"""Pydantic schemas for API v1 - Simple DTOs only."""

from datetime import datetime

from pydantic import BaseModel, Field


class UploadResponse(BaseModel):
    """Successful ingestion."""

    ok: bool = True
    id: str


class SearchHitResponse(BaseModel):
    meeting_id: str
    idx: int = Field(ge=1, description="1-based position of the meeting in the store")
    text: str
    score: float


class SearchResponse(BaseModel):
    hits: list[SearchHitResponse]
    related_ids: list[str]


class MeetingSummaryResponse(BaseModel):
    """Listing entry."""

    idx: int
    id: str
    title: str
    image_url: str


class HealthStatus(BaseModel):
    """Health check response."""

    status: str
    service: str
    version: str
    timestamp: datetime = Field(default_factory=datetime.now)
    meetings: int
    dependencies: dict[str, str] = {}
    models: dict[str, str] = {}
