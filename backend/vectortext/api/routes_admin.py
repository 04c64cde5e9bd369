"""Administrative routes for VectorText."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from vectortext.api.dependencies import get_corpus_cache, get_message_store
from vectortext.core.metrics import metrics_response
from vectortext.db.message_store import SQLiteMessageStore
from vectortext.indexing.corpus import CorpusCache
from vectortext.indexing.embeddings import EMBEDDING_DIMENSION, EMBEDDING_VERSION
from vectortext.models.dto import StatsResponse

router = APIRouter()


@router.get("/stats", response_model=StatsResponse, summary="Index coverage and corpus statistics")
def index_stats(
    store: SQLiteMessageStore = Depends(get_message_store),
    cache: CorpusCache = Depends(get_corpus_cache),
) -> StatsResponse:
    return StatsResponse(
        total_messages=store.count_messages(),
        embedded_messages=store.count_embedded(),
        embedding_dimension=EMBEDDING_DIMENSION,
        embedding_version=EMBEDDING_VERSION,
        corpus=cache.get().describe() if cache.is_warm else None,
    )


@router.get("/metrics", summary="Prometheus metrics")
def get_metrics():
    return metrics_response()


__all__ = ["router"]
