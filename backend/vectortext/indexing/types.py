"""Indexing run data structures."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol


class IndexingState(str, Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    CORPUS_REBUILD = "corpus_rebuild"
    BATCH_PROCESSING = "batch_processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATES


_TERMINAL_STATES = frozenset({IndexingState.COMPLETED, IndexingState.CANCELLED, IndexingState.FAILED})


@dataclass(frozen=True, slots=True)
class IndexingProgress:
    """Snapshot delivered to progress listeners."""

    processed: int
    total: int
    message: str
    state: IndexingState

    @property
    def fraction(self) -> float:
        if self.total <= 0:
            return 1.0 if self.state.is_terminal else 0.0
        return min(1.0, self.processed / self.total)

    def to_dict(self) -> dict[str, Any]:
        return {
            "processed": self.processed,
            "total": self.total,
            "message": self.message,
            "state": self.state.value,
            "progress": self.fraction,
        }


@dataclass(slots=True)
class IndexingOutcome:
    """Terminal summary of one indexing run."""

    state: IndexingState
    processed: int = 0
    failed: int = 0
    total: int = 0
    message: str = ""
    started_at: int | None = None
    finished_at: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "state": self.state.value,
            "processed": self.processed,
            "failed": self.failed,
            "total": self.total,
            "message": self.message,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
        }


class ProgressListener(Protocol):
    def on_progress(self, progress: IndexingProgress) -> None:
        ...

    def on_finished(self, outcome: IndexingOutcome) -> None:
        ...


__all__ = [
    "IndexingState",
    "IndexingProgress",
    "IndexingOutcome",
    "ProgressListener",
]
