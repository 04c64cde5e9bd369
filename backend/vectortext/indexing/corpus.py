"""Corpus-wide term statistics."""

from __future__ import annotations

import math
import threading
from collections import Counter
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Iterable, Mapping

from vectortext.core.logging import get_logger
from vectortext.core.metrics import CORPUS_DOCUMENTS
from vectortext.indexing.tokenizer import MIN_TOKEN_LENGTH, STOP_WORDS, tokenize
from vectortext.utils.time import now_ms

if TYPE_CHECKING:
    from vectortext.db.message_store import MessageStore

logger = get_logger(__name__)

DEFAULT_IDF = 1.0


@dataclass(frozen=True, slots=True)
class CorpusStatistics:
    """Immutable snapshot of document count and per-term IDF weights."""

    document_count: int = 0
    idf_weights: Mapping[str, float] = field(default_factory=lambda: MappingProxyType({}))
    built_at: int | None = None

    @classmethod
    def build(cls, bodies: Iterable[str]) -> "CorpusStatistics":
        """Compute ``idf(t) = ln((N + 1) / (df(t) + 1)) + 1`` over ``bodies``."""
        document_frequency: Counter[str] = Counter()
        total = 0
        for body in bodies:
            total += 1
            document_frequency.update(set(tokenize(body)))
        weights = {
            term: math.log((total + 1) / (df + 1)) + 1.0
            for term, df in document_frequency.items()
        }
        return cls(document_count=total, idf_weights=MappingProxyType(weights), built_at=now_ms())

    @classmethod
    def empty(cls) -> "CorpusStatistics":
        return cls()

    def idf(self, term: str) -> float:
        return self.idf_weights.get(term, DEFAULT_IDF)

    @property
    def vocabulary_size(self) -> int:
        return len(self.idf_weights)

    def describe(self) -> dict[str, Any]:
        return {
            "total_documents": self.document_count,
            "unique_words": self.vocabulary_size,
            "min_word_length": MIN_TOKEN_LENGTH,
            "stop_words_count": len(STOP_WORDS),
            "built_at": self.built_at,
        }


class CorpusCache:
    """Holds the most recent corpus snapshot for query-time embedding.

    The indexer replaces the snapshot once per run. Searches read whatever
    snapshot is current, so relevance can drift between runs until the next
    rebuild.
    """

    def __init__(self, initial: CorpusStatistics | None = None) -> None:
        self._lock = threading.Lock()
        self._snapshot = initial

    @property
    def is_warm(self) -> bool:
        return self._snapshot is not None

    def get(self) -> CorpusStatistics:
        with self._lock:
            return self._snapshot if self._snapshot is not None else CorpusStatistics.empty()

    def replace(self, stats: CorpusStatistics) -> None:
        with self._lock:
            self._snapshot = stats
        CORPUS_DOCUMENTS.set(stats.document_count)
        logger.info(
            "Corpus snapshot updated: %s documents, %s unique words",
            stats.document_count,
            stats.vocabulary_size,
        )

    def warm(self, store: "MessageStore") -> CorpusStatistics:
        """Build a snapshot from ``store`` unless one is already cached."""
        if self._snapshot is None:
            self.replace(CorpusStatistics.build(store.iter_all_bodies()))
        return self.get()


__all__ = ["CorpusStatistics", "CorpusCache", "DEFAULT_IDF"]
