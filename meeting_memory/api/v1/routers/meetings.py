"""Meeting upload, listing and detail endpoints."""

from collections.abc import AsyncIterator

from fastapi import APIRouter, Depends, HTTPException, Request, status
import structlog

from meeting_memory.api.v1.dependencies import get_pipeline, get_store, get_upload_limit
from meeting_memory.api.v1.schemas import MeetingSummaryResponse, UploadResponse
from meeting_memory.exceptions import IngestionError, UploadTooLargeError
from meeting_memory.ingestion import IngestionPipeline
from meeting_memory.store import Meeting, MeetingStore

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/api/v1", tags=["meetings"])


def _too_large(limit: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        detail=f"Recording too large. Maximum size: {limit} bytes",
    )


async def _bounded_body(request: Request, limit: int) -> AsyncIterator[bytes]:
    """Non-empty body blocks, raising once more than `limit` bytes arrive."""
    received = 0
    async for block in request.stream():
        if not block:
            continue
        received += len(block)
        if received > limit:
            raise UploadTooLargeError(f"Upload exceeds {limit} bytes")
        yield block


async def _prepend(first: bytes, rest: AsyncIterator[bytes]) -> AsyncIterator[bytes]:
    yield first
    async for block in rest:
        yield block


@router.post("/upload", response_model=UploadResponse)
async def upload_recording(
    request: Request,
    pipeline: IngestionPipeline = Depends(get_pipeline),
    limit: int = Depends(get_upload_limit),
) -> UploadResponse:
    """Ingest a raw audio or video recording sent as the request body.

    Logic:
    1. Reject a declared Content-Length over the limit up front
    2. Stream the body into the pipeline, counting bytes as they arrive
    3. Return the new meeting id

    Expected behavior:
    - `Content-Type: video/*` bodies are transcoded to audio first
    - An empty body returns 400; a body past the limit returns 413
    - Any fatal stage failure returns 500 and persists nothing
    """
    content_type = request.headers.get("content-type")
    declared_length = request.headers.get("content-length")
    if declared_length and declared_length.isdigit() and int(declared_length) > limit:
        raise _too_large(limit)

    body = _bounded_body(request, limit)
    try:
        first = await anext(body)
    except StopAsyncIteration:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Request body is empty"
        ) from None
    except UploadTooLargeError as e:
        raise _too_large(limit) from e

    try:
        meeting = await pipeline.ingest(_prepend(first, body), content_type)
    except IngestionError as e:
        if isinstance(e.__cause__, UploadTooLargeError):
            logger.warning("Upload rejected", reason=e.message, limit_bytes=limit)
            raise _too_large(limit) from e
        logger.error(
            "Upload failed", stage=e.stage.value, error=e.message, content_type=content_type
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Ingestion failed at {e.stage.value}: {e.message}",
        ) from e

    return UploadResponse(id=meeting.id)


@router.get("/meetings", response_model=list[MeetingSummaryResponse])
async def list_meetings(
    store: MeetingStore = Depends(get_store),
) -> list[MeetingSummaryResponse]:
    """All meetings in store order with their 1-based display index."""
    return [
        MeetingSummaryResponse(
            idx=position, id=m.id, title=m.title, image_url=m.image_url
        )
        for position, m in enumerate(store.meetings(), start=1)
    ]


@router.get("/meetings/{meeting_id}", response_model=Meeting)
async def get_meeting(
    meeting_id: str,
    store: MeetingStore = Depends(get_store),
) -> Meeting:
    meeting = store.get(meeting_id)
    if meeting is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Meeting not found"
        )
    return meeting
