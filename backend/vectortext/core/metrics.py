"""Prometheus metrics instrumentation."""

from __future__ import annotations

from fastapi import Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

REGISTRY = CollectorRegistry()

SEARCH_COUNT = Counter(
    "vtxt_search_requests_total",
    "Total semantic search requests",
    labelnames=("outcome",),
    registry=REGISTRY,
)

SEARCH_LATENCY = Histogram(
    "vtxt_search_latency_seconds",
    "Latency of semantic search scans",
    registry=REGISTRY,
)

CORRUPT_EMBEDDINGS = Counter(
    "vtxt_corrupt_embeddings_total",
    "Stored embeddings skipped because they could not be deserialized",
    registry=REGISTRY,
)

INDEX_RUNS = Counter(
    "vtxt_index_runs_total",
    "Indexing runs by terminal state",
    labelnames=("state",),
    registry=REGISTRY,
)

INDEX_DURATION = Histogram(
    "vtxt_index_duration_seconds",
    "Indexing run duration",
    registry=REGISTRY,
)

INDEXED_MESSAGES = Counter(
    "vtxt_indexed_messages_total",
    "Messages embedded and persisted",
    registry=REGISTRY,
)

CORPUS_DOCUMENTS = Gauge(
    "vtxt_corpus_documents",
    "Document count of the current corpus snapshot",
    registry=REGISTRY,
)


def metrics_response() -> Response:
    """Return Prometheus metrics as an HTTP response."""
    payload = generate_latest(REGISTRY)
    return Response(content=payload, media_type=CONTENT_TYPE_LATEST)


__all__ = [
    "REGISTRY",
    "SEARCH_COUNT",
    "SEARCH_LATENCY",
    "CORRUPT_EMBEDDINGS",
    "INDEX_RUNS",
    "INDEX_DURATION",
    "INDEXED_MESSAGES",
    "CORPUS_DOCUMENTS",
    "metrics_response",
]
