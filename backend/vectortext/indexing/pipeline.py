"""Background embedding pipeline."""

from __future__ import annotations

import threading
import time
from typing import Sequence

from vectortext.core.config import Settings
from vectortext.core.errors import IndexingInProgressError
from vectortext.core.logging import get_logger
from vectortext.core.metrics import INDEX_DURATION, INDEX_RUNS, INDEXED_MESSAGES
from vectortext.db.message_store import MessageStore
from vectortext.indexing.corpus import CorpusCache, CorpusStatistics
from vectortext.indexing.embeddings import EmbeddingModel
from vectortext.indexing.types import (
    IndexingOutcome,
    IndexingProgress,
    IndexingState,
    ProgressListener,
)
from vectortext.models.entities import PendingMessage
from vectortext.utils.time import now_ms

logger = get_logger(__name__)


class EmbeddingIndexer:
    """Keep every message embedded against a fresh corpus snapshot.

    A run scans for messages without a current-version embedding, rebuilds
    corpus statistics over all bodies, then embeds pending messages in
    batches, reading bodies one batch at a time. Cancellation is honoured
    between batches; work persisted by earlier batches is kept. Only a
    failure to read from the store ends the run as FAILED, individual
    messages that fail are skipped and picked up by the next run.
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
        self._state = IndexingState.IDLE

    @property
    def state(self) -> IndexingState:
        return self._state

    def run(
        self,
        cancel_event: threading.Event | None = None,
        listener: ProgressListener | None = None,
    ) -> IndexingOutcome:
        cancel_event = cancel_event or threading.Event()
        run = _RunContext(listener=listener, started_at=now_ms(), started=time.perf_counter())

        self._state = IndexingState.SCANNING
        try:
            pending_ids = self.store.list_pending(self.embedding_model.version)
        except Exception as exc:
            logger.exception("Unable to enumerate messages needing embeddings")
            return self._finish(run, IndexingState.FAILED, message=f"Error: {exc}")

        run.total = len(pending_ids)
        if not pending_ids:
            logger.info("No messages need embedding")
            return self._finish(run, IndexingState.COMPLETED, message="All messages are already indexed")
        logger.info("Found %s messages needing embeddings", run.total)

        self._state = IndexingState.CORPUS_REBUILD
        try:
            stats = CorpusStatistics.build(self.store.iter_all_bodies())
        except Exception as exc:
            logger.exception("Unable to read message bodies for corpus rebuild")
            return self._finish(run, IndexingState.FAILED, message=f"Error: {exc}")
        self.corpus_cache.replace(stats)

        self._state = IndexingState.BATCH_PROCESSING
        batch_size = self.settings.write_batch_size
        for start in range(0, run.total, batch_size):
            if cancel_event.is_set():
                logger.info("Indexing cancelled at %s / %s messages", run.processed, run.total)
                return self._finish(
                    run,
                    IndexingState.CANCELLED,
                    message=f"Indexing cancelled: {run.processed} / {run.total} messages indexed",
                )
            try:
                batch = self.store.fetch_pending(pending_ids[start : start + batch_size])
            except Exception as exc:
                logger.exception("Unable to read message bodies for batch at offset %s", start)
                return self._finish(run, IndexingState.FAILED, message=f"Error: {exc}")
            self._process_batch(run, batch, stats)
            logger.debug("Processed batch: %s / %s messages", run.processed, run.total)

        return self._finish(
            run,
            IndexingState.COMPLETED,
            message=f"Indexing complete! {run.processed} messages indexed",
        )

    # Internal helpers -------------------------------------------------

    def _process_batch(self, run: "_RunContext", batch: Sequence[PendingMessage], stats: CorpusStatistics) -> None:
        interval = self.settings.progress_interval
        reported_at = -1
        for message in batch:
            try:
                vector = self.embedding_model.embed(message.body, stats)
                self.store.update_embedding(
                    message.id,
                    self.embedding_model.to_storage_form(vector),
                    self.embedding_model.version,
                    now_ms(),
                )
            except Exception:
                run.failed += 1
                logger.exception(
                    "Failed to generate embedding for message %s", message.id, extra={"message_id": message.id}
                )
                continue
            run.processed += 1
            INDEXED_MESSAGES.inc()
            if run.processed % interval == 0:
                self._report(run, f"Indexed {run.processed} / {run.total} messages")
                reported_at = run.processed
        if reported_at != run.processed:
            self._report(run, f"Indexed {run.processed} / {run.total} messages")

    def _report(self, run: "_RunContext", message: str) -> None:
        if run.listener is None:
            return
        run.listener.on_progress(
            IndexingProgress(processed=run.processed, total=run.total, message=message, state=self._state)
        )

    def _finish(self, run: "_RunContext", state: IndexingState, message: str) -> IndexingOutcome:
        self._state = state
        outcome = IndexingOutcome(
            state=state,
            processed=run.processed,
            failed=run.failed,
            total=run.total,
            message=message,
            started_at=run.started_at,
            finished_at=now_ms(),
        )
        INDEX_RUNS.labels(state=state.value).inc()
        INDEX_DURATION.observe(time.perf_counter() - run.started)
        logger.info(
            "Embedding generation %s: %s / %s messages (%s failed)",
            state.value,
            run.processed,
            run.total,
            run.failed,
        )
        if run.listener is not None:
            self._report(run, message)
            run.listener.on_finished(outcome)
        return outcome


class _RunContext:
    __slots__ = ("listener", "started_at", "started", "total", "processed", "failed")

    def __init__(self, listener: ProgressListener | None, started_at: int, started: float) -> None:
        self.listener = listener
        self.started_at = started_at
        self.started = started
        self.total = 0
        self.processed = 0
        self.failed = 0


class IndexingJob:
    """Runs the indexer on a background thread, one run at a time."""

    def __init__(self, indexer: EmbeddingIndexer) -> None:
        self.indexer = indexer
        self._lock = threading.Lock()
        self._thread: threading.Thread | None = None
        self._cancel_event = threading.Event()
        self._progress: IndexingProgress | None = None
        self._outcome: IndexingOutcome | None = None

    @property
    def is_running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    def start(self) -> None:
        with self._lock:
            if self.is_running:
                raise IndexingInProgressError("An indexing run is already in progress")
            self._cancel_event = threading.Event()
            self._progress = None
            self._thread = threading.Thread(
                target=self.indexer.run,
                kwargs={"cancel_event": self._cancel_event, "listener": self},
                name="vectortext-indexer",
                daemon=True,
            )
            self._thread.start()

    def cancel(self) -> bool:
        if not self.is_running:
            return False
        self._cancel_event.set()
        return True

    def wait(self, timeout: float | None = None) -> IndexingOutcome | None:
        thread = self._thread
        if thread is not None:
            thread.join(timeout)
        return self._outcome

    def on_progress(self, progress: IndexingProgress) -> None:
        self._progress = progress

    def on_finished(self, outcome: IndexingOutcome) -> None:
        self._outcome = outcome

    def status(self) -> dict[str, object]:
        progress = self._progress
        return {
            "running": self.is_running,
            "state": self.indexer.state.value,
            "progress": progress.to_dict() if progress else None,
            "last_outcome": self._outcome.to_dict() if self._outcome else None,
        }


__all__ = ["EmbeddingIndexer", "IndexingJob"]
