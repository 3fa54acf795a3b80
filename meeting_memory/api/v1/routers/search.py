"""Semantic search endpoint."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
import openai
import structlog

from meeting_memory.api.v1.dependencies import get_search_engine
from meeting_memory.api.v1.schemas import SearchHitResponse, SearchResponse
from meeting_memory.exceptions import InvalidQueryError, MalformedOutputError
from meeting_memory.search import SearchEngine

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/api/v1", tags=["search"])


@router.get("/search", response_model=SearchResponse)
async def search_meetings(
    q: str | None = Query(default=None, description="Free-text query"),
    engine: SearchEngine = Depends(get_search_engine),
) -> SearchResponse:
    """Rank stored transcript chunks against a free-text query.

    Expected behavior:
    - Missing or blank `q` returns 400 without any embedding call
    - Up to 10 hits scoring at least 0.05, best first
    - `related_ids` lists up to 3 other meetings present in the hits
    """
    try:
        result = await engine.search(q)
    except InvalidQueryError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)
        ) from e
    except (openai.OpenAIError, MalformedOutputError) as e:
        logger.error("Query embedding failed", error=str(e), error_type=type(e).__name__)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Query embedding failed: {e}",
        ) from e

    return SearchResponse(
        hits=[
            SearchHitResponse(
                meeting_id=hit.meeting_id, idx=hit.idx, text=hit.text, score=hit.score
            )
            for hit in result.hits
        ],
        related_ids=result.related_ids,
    )
