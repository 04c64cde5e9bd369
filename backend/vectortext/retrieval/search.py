"""Semantic message search."""

from __future__ import annotations

import heapq
import time
from dataclasses import dataclass, field
from typing import Any

from vectortext.core.config import Settings
from vectortext.core.logging import get_logger
from vectortext.core.metrics import CORRUPT_EMBEDDINGS, SEARCH_COUNT, SEARCH_LATENCY
from vectortext.db.message_store import MessageStore
from vectortext.indexing.corpus import CorpusCache
from vectortext.indexing.embeddings import EmbeddingModel, is_zero_vector
from vectortext.models.entities import StoredEmbedding
from vectortext.retrieval.similarity import cosine_similarity
from vectortext.utils.text import snippet

logger = get_logger(__name__)

DEFAULT_MAX_RESULTS = 5
MAX_RESULTS_LIMIT = 20
DEFAULT_SIMILARITY_THRESHOLD = 0.15


@dataclass(slots=True)
class SearchResult:
    message_id: int
    thread_id: int
    sender: str
    timestamp: int
    snippet: str
    similarity: float
    body: str = field(repr=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "message_id": self.message_id,
            "thread_id": self.thread_id,
            "sender": self.sender,
            "timestamp": self.timestamp,
            "snippet": self.snippet,
            "similarity": self.similarity,
        }


def clamp_max_results(value: int) -> int:
    return min(MAX_RESULTS_LIMIT, max(1, int(value)))


def clamp_threshold(value: float) -> float:
    return min(1.0, max(0.0, float(value)))


class MessageSearchService:
    """Brute-force cosine scan over stored message embeddings.

    Stored vectors are streamed from the store in ``read_batch_size`` pages
    and only the best ``max_results`` candidates are retained, so memory
    stays bounded by one page plus the result heap. The query is embedded
    with the cached corpus snapshot from the last indexing run.
    """

    def __init__(
        self,
        store: MessageStore,
        corpus_cache: CorpusCache,
        settings: Settings,
        embedding_model: EmbeddingModel | None = None,
    ) -> None:
        self.store = store
        self.corpus_cache = corpus_cache
        self.settings = settings
        self.embedding_model = embedding_model or EmbeddingModel()

    def search(
        self,
        query: str,
        max_results: int = DEFAULT_MAX_RESULTS,
        threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
    ) -> list[SearchResult]:
        start_time = time.perf_counter()
        limit = clamp_max_results(max_results)
        min_score = clamp_threshold(threshold)
        logger.debug("Searching messages (threshold=%s, max=%s)", min_score, limit)

        query_vector = self.embedding_model.embed(query, self.corpus_cache.get())
        if is_zero_vector(query_vector):
            SEARCH_COUNT.labels(outcome="empty_query").inc()
            return []

        # Min-heap keyed on (score, timestamp, -id): heap[0] is the weakest kept hit.
        best: list[tuple[float, int, int, StoredEmbedding]] = []
        scanned = 0
        skipped = 0
        for batch in self.store.iter_embedded_batches(self.settings.read_batch_size):
            for row in batch:
                vector = self.embedding_model.from_storage_form(row.embedding)
                if vector is None:
                    skipped += 1
                    CORRUPT_EMBEDDINGS.inc()
                    continue
                scanned += 1
                if is_zero_vector(vector):
                    continue
                score = cosine_similarity(query_vector, vector)
                if score < min_score:
                    continue
                entry = (score, row.timestamp, -row.message_id, row)
                if len(best) < limit:
                    heapq.heappush(best, entry)
                elif entry[:3] > best[0][:3]:
                    heapq.heapreplace(best, entry)

        ranked = sorted(best, key=lambda item: item[:3], reverse=True)
        results = [self._build_result(score, row) for score, _, _, row in ranked]

        SEARCH_LATENCY.observe(time.perf_counter() - start_time)
        SEARCH_COUNT.labels(outcome="hit" if results else "miss").inc()
        if skipped:
            logger.warning("Skipped %s unreadable embeddings during search", skipped, extra={"skipped": skipped})
        logger.debug("Scanned %s embeddings, returning %s results", scanned, len(results))
        return results

    def _build_result(self, score: float, row: StoredEmbedding) -> SearchResult:
        return SearchResult(
            message_id=row.message_id,
            thread_id=row.thread_id,
            sender=row.sender,
            timestamp=row.timestamp,
            snippet=snippet(row.body, self.settings.snippet_length),
            similarity=score,
            body=row.body,
        )


__all__ = [
    "MessageSearchService",
    "SearchResult",
    "clamp_max_results",
    "clamp_threshold",
    "DEFAULT_MAX_RESULTS",
    "MAX_RESULTS_LIMIT",
    "DEFAULT_SIMILARITY_THRESHOLD",
]
