"""Semantic search - similarity scoring and ranking."""

from .engine import SearchEngine, SearchHit, SearchResult
from .similarity import cosine_similarity

__all__ = ["SearchEngine", "SearchHit", "SearchResult", "cosine_similarity"]
