"""Durable meeting collection."""

from .meeting_store import MeetingStore
from .models import ActionItem, Chunk, Meeting, StoreDocument

__all__ = [
    "ActionItem",
    "Chunk",
    "Meeting",
    "MeetingStore",
    "StoreDocument",
]
