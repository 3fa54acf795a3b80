"""
JSON-file meeting store.

The persisted document is the source of truth. The in-memory collection is an
immutable snapshot that is only replaced after the new document has been
written and atomically moved into place, so a failed write leaves both the
file and the cache at the last persisted state.
"""

import asyncio
import os
from pathlib import Path
import tempfile

from pydantic import ValidationError
import structlog

from meeting_memory.exceptions import (
    StoreLoadError,
    StoreNotLoadedError,
    StoreWriteError,
)
from meeting_memory.store.models import Meeting, StoreDocument

logger = structlog.get_logger(__name__)


class MeetingStore:
    """
    Process-wide collection of meetings with serialized, durable appends.

    Example:
        >>> store = MeetingStore("data/db.json")
        >>> store.load()
        >>> await store.append(meeting)
        >>> len(store.meetings())
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._meetings: tuple[Meeting, ...] | None = None
        # Single writer lock: read-current, add-one, persist must not interleave
        self._write_lock = asyncio.Lock()

    @property
    def is_loaded(self) -> bool:
        return self._meetings is not None

    def load(self) -> tuple[Meeting, ...]:
        """
        Read the persisted collection. Must complete before any other call.

        Repeated calls return the already-loaded snapshot without touching disk.

        Raises:
            StoreLoadError: If the file exists but is not a valid collection
        """
        if self._meetings is not None:
            return self._meetings

        if not self.path.exists():
            self._meetings = ()
            logger.info("Meeting store initialized empty", path=str(self.path))
            return self._meetings

        try:
            document = StoreDocument.model_validate_json(self.path.read_bytes())
        except (OSError, ValidationError) as e:
            logger.error("Meeting store load failed", path=str(self.path), error=str(e))
            raise StoreLoadError(f"Cannot load meeting store {self.path}: {e}") from e

        self._meetings = tuple(document.meetings)
        logger.info(
            "Meeting store loaded", path=str(self.path), meetings=len(self._meetings)
        )
        return self._meetings

    def meetings(self) -> tuple[Meeting, ...]:
        """Current snapshot, in insertion order."""
        if self._meetings is None:
            raise StoreNotLoadedError("MeetingStore.load() has not been called")
        return self._meetings

    def get(self, meeting_id: str) -> Meeting | None:
        return next((m for m in self.meetings() if m.id == meeting_id), None)

    def count(self) -> int:
        return len(self.meetings())

    async def append(self, meeting: Meeting) -> None:
        """
        Add one meeting and persist the whole collection before returning.

        Raises:
            StoreNotLoadedError: If load() was not called
            StoreWriteError: If the id already exists or the write failed
        """
        async with self._write_lock:
            current = self.meetings()
            if any(m.id == meeting.id for m in current):
                raise StoreWriteError(f"Meeting {meeting.id} already exists")

            updated = current + (meeting,)
            try:
                cancelled = await self._persist(updated)
            except OSError as e:
                logger.error(
                    "Meeting store write failed",
                    meeting_id=meeting.id,
                    path=str(self.path),
                    error=str(e),
                )
                raise StoreWriteError(f"Failed to persist meeting {meeting.id}: {e}") from e

            self._meetings = updated

        logger.info("Meeting appended", meeting_id=meeting.id, meetings=len(updated))
        if cancelled:
            raise asyncio.CancelledError

    async def _persist(self, meetings: tuple[Meeting, ...]) -> bool:
        """
        Run the write in a worker thread and wait for it even if cancelled.

        The thread cannot be interrupted, so the caller waits for the file to
        settle before the snapshot is updated. Returns whether a cancellation
        arrived meanwhile.
        """
        write = asyncio.ensure_future(asyncio.to_thread(self._write, meetings))
        cancelled = False
        while True:
            try:
                await asyncio.shield(write)
                return cancelled
            except asyncio.CancelledError:
                if write.cancelled():
                    raise
                cancelled = True

    def _write(self, meetings: tuple[Meeting, ...]) -> None:
        """Write to a sibling temp file, fsync, then atomically replace."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = StoreDocument(meetings=list(meetings)).model_dump_json(indent=2)

        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
