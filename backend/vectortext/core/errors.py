"""Exception hierarchy shared by the store, indexer and search layers."""

from __future__ import annotations


class VectorTextError(Exception):
    """Base class for application errors."""


class CorpusReadError(VectorTextError):
    """The message store could not be enumerated."""


class EmbeddingPersistenceError(VectorTextError):
    """Writing a single message's embedding failed."""

    def __init__(self, message_id: int, reason: str) -> None:
        super().__init__(f"Failed to persist embedding for message {message_id}: {reason}")
        self.message_id = message_id


class IndexingInProgressError(VectorTextError):
    """An indexing run was requested while another one is active."""


__all__ = [
    "VectorTextError",
    "CorpusReadError",
    "EmbeddingPersistenceError",
    "IndexingInProgressError",
]
