"""Semantic search over stored meeting chunks."""

from dataclasses import dataclass, field
import time
from typing import Protocol

import structlog

from meeting_memory.exceptions import InvalidQueryError
from meeting_memory.search.similarity import cosine_similarity
from meeting_memory.store import MeetingStore

logger = structlog.get_logger(__name__)

TOP_K = 10
MIN_SCORE = 0.05
MAX_RELATED = 3


class Embedder(Protocol):
    async def embed(self, text: str) -> list[float]: ...


@dataclass(frozen=True)
class SearchHit:
    """One scored chunk. `idx` is the 1-based store position of its meeting."""

    meeting_id: str
    idx: int
    text: str
    score: float


@dataclass(frozen=True)
class SearchResult:
    hits: list[SearchHit] = field(default_factory=list)
    related_ids: list[str] = field(default_factory=list)


class SearchEngine:
    """Exact linear-scan cosine search across every chunk in the store."""

    def __init__(
        self,
        store: MeetingStore,
        embedder: Embedder,
        top_k: int = TOP_K,
        min_score: float = MIN_SCORE,
    ):
        self._store = store
        self._embedder = embedder
        self.top_k = top_k
        self.min_score = min_score

    async def search(self, query: str | None) -> SearchResult:
        """
        Rank chunks against the query and suggest related meetings.

        Logic:
        1. Reject blank queries before any inference call
        2. Embed the query and score every chunk in the store snapshot
        3. Stable sort descending, keep the top `top_k`, then drop hits
           under `min_score` (threshold is applied after truncation)
        4. Related meetings are the distinct hit meetings after the best one

        Raises:
            InvalidQueryError: If the query is missing or whitespace-only
        """
        q = (query or "").strip()
        if not q:
            raise InvalidQueryError("Query must not be empty")

        start_time = time.time()
        query_vector = await self._embedder.embed(q)

        # Snapshot once so positions and chunks agree for this query
        meetings = self._store.meetings()
        scored = [
            SearchHit(
                meeting_id=meeting.id,
                idx=position,
                text=chunk.text,
                score=cosine_similarity(query_vector, chunk.embedding),
            )
            for position, meeting in enumerate(meetings, start=1)
            for chunk in meeting.chunks
        ]

        # sorted() is stable, including with reverse=True
        ranked = sorted(scored, key=lambda hit: hit.score, reverse=True)
        hits = [hit for hit in ranked[: self.top_k] if hit.score >= self.min_score]

        result = SearchResult(hits=hits, related_ids=related_meeting_ids(hits))

        logger.info(
            "Search completed",
            query_chars=len(q),
            meetings=len(meetings),
            chunks_scored=len(scored),
            hits=len(result.hits),
            related=len(result.related_ids),
            search_time_ms=int((time.time() - start_time) * 1000),
        )
        return result


def related_meeting_ids(hits: list[SearchHit]) -> list[str]:
    """Distinct meeting ids in first-appearance order, skipping the best match."""
    distinct = list(dict.fromkeys(hit.meeting_id for hit in hits))
    return distinct[1 : 1 + MAX_RELATED]
