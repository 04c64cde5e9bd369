"""TF-IDF feature-hashing embeddings."""

from __future__ import annotations

import hashlib
import logging
import math
from collections import Counter
from typing import Iterable, Sequence

from vectortext.indexing.corpus import CorpusStatistics
from vectortext.indexing.tokenizer import tokenize

logger = logging.getLogger(__name__)

EMBEDDING_DIMENSION = 384
EMBEDDING_VERSION = 1

_STORAGE_SEPARATOR = ","
_STORAGE_PRECISION = ".7g"


class EmbeddingModel:
    """Hashed TF-IDF embedding model with deterministic output.

    Each distinct token contributes ``tf * idf`` to the bucket chosen by a
    stable hash of the token. Bucket collisions are summed; the result is
    L2-normalized unless no token survived tokenization.
    """

    def __init__(self, dim: int = EMBEDDING_DIMENSION, version: int = EMBEDDING_VERSION) -> None:
        self._dim = dim
        self._version = version

    @property
    def dim(self) -> int:
        return self._dim

    @property
    def version(self) -> int:
        return self._version

    def embed(self, text: str, stats: CorpusStatistics) -> list[float]:
        vector = [0.0] * self._dim
        tokens = tokenize(text)
        if not tokens:
            return vector
        total = len(tokens)
        for term, count in Counter(tokens).items():
            weight = (count / total) * stats.idf(term)
            vector[_hash_token(term, self._dim)] += weight
        _normalize(vector)
        return vector

    def to_storage_form(self, vector: Sequence[float]) -> str:
        return _STORAGE_SEPARATOR.join(format(value, _STORAGE_PRECISION) for value in vector)

    def from_storage_form(self, payload: str | None) -> list[float] | None:
        """Parse a stored vector, returning ``None`` for anything unusable."""
        if not payload:
            return None
        try:
            vector = [float(part) for part in payload.split(_STORAGE_SEPARATOR)]
        except (TypeError, ValueError, AttributeError):
            logger.warning("Discarding malformed embedding payload (%d chars)", len(str(payload)))
            return None
        if len(vector) != self._dim:
            logger.warning("Discarding embedding with %d components, expected %d", len(vector), self._dim)
            return None
        if not all(math.isfinite(value) for value in vector):
            logger.warning("Discarding embedding containing non-finite values")
            return None
        return vector


def is_zero_vector(vector: Iterable[float]) -> bool:
    return all(value == 0.0 for value in vector)


def _hash_token(token: str, dim: int) -> int:
    digest = hashlib.blake2b(token.encode("utf-8"), digest_size=8).digest()
    value = int.from_bytes(digest, "big")
    return value % dim


def _normalize(vector: list[float]) -> None:
    norm = math.sqrt(sum(value * value for value in vector))
    if norm == 0:
        return
    inv = 1.0 / norm
    for idx, value in enumerate(vector):
        vector[idx] = value * inv


__all__ = [
    "EmbeddingModel",
    "EMBEDDING_DIMENSION",
    "EMBEDDING_VERSION",
    "is_zero_vector",
]
