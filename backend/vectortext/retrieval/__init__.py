"""Retrieval components."""

from .context import build_context, format_result, format_results
from .search import MessageSearchService, SearchResult
from .similarity import cosine_similarity

__all__ = [
    "MessageSearchService",
    "SearchResult",
    "cosine_similarity",
    "build_context",
    "format_result",
    "format_results",
]
