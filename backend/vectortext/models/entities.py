"""Internal dataclasses representing persisted entities."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class Message:
    id: int
    thread_id: int
    sender: str
    body: str
    timestamp: int
    embedding: str | None
    embedding_version: int
    last_indexed: int | None

    @property
    def has_embedding(self) -> bool:
        return bool(self.embedding)


@dataclass(slots=True)
class PendingMessage:
    """Message that still needs an embedding (missing or stale version)."""

    id: int
    body: str


@dataclass(slots=True)
class StoredEmbedding:
    """Row projection streamed by the similarity scan."""

    message_id: int
    thread_id: int
    sender: str
    timestamp: int
    body: str
    embedding: str


__all__ = ["Message", "PendingMessage", "StoredEmbedding"]
