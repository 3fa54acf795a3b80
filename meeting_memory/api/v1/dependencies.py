"""Accessors for the components the app wires up at startup."""

from fastapi import Request

from meeting_memory.config import settings
from meeting_memory.ingestion import IngestionPipeline
from meeting_memory.search import SearchEngine
from meeting_memory.store import MeetingStore


def get_store(request: Request) -> MeetingStore:
    return request.app.state.store


def get_pipeline(request: Request) -> IngestionPipeline:
    return request.app.state.pipeline


def get_search_engine(request: Request) -> SearchEngine:
    return request.app.state.search_engine


def get_upload_limit() -> int:
    """Maximum accepted upload size in bytes."""
    return settings.max_upload_size_bytes
