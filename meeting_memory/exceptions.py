"""
Custom exceptions for the ingestion pipeline, store and search engine.
"""

from enum import Enum


class MeetingMemoryError(Exception):
    """Base exception for all service errors."""


class StoreError(MeetingMemoryError):
    """Meeting store errors."""


class StoreNotLoadedError(StoreError):
    """Store used before load() completed."""


class StoreLoadError(StoreError):
    """Persisted collection exists but cannot be read."""


class StoreWriteError(StoreError):
    """Append could not be persisted; in-memory state was left untouched."""


class TranscodeError(MeetingMemoryError):
    """ffmpeg could not be spawned or exited non-zero."""

    def __init__(self, message: str, returncode: int | None = None):
        self.returncode = returncode
        super().__init__(message)


class MalformedOutputError(MeetingMemoryError):
    """An inference call returned output that does not fit its contract."""


class InvalidQueryError(MeetingMemoryError):
    """Search query is missing or blank."""


class UploadTooLargeError(MeetingMemoryError):
    """Upload body grew past the configured size limit."""


class Stage(str, Enum):
    """Ingestion stages, in execution order."""

    RECEIVE = "receive"
    NORMALIZE = "normalize"
    TRANSCRIBE = "transcribe"
    SUMMARIZE = "summarize"
    EXTRACT_ACTIONS = "extract_actions"
    ILLUSTRATE = "illustrate"
    EMBED_CHUNKS = "embed_chunks"
    PERSIST = "persist"


class IngestionError(MeetingMemoryError):
    """A fatal stage failure. The run was aborted and nothing was persisted."""

    def __init__(self, stage: Stage, message: str):
        self.stage = stage
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return self.message
