"""Shared FastAPI dependencies."""

from __future__ import annotations

from functools import lru_cache

from vectortext.core.config import Settings, get_settings
from vectortext.core.logging import get_logger
from vectortext.db.message_store import SQLiteMessageStore
from vectortext.db.sqlite import SQLiteDatabase
from vectortext.indexing.corpus import CorpusCache
from vectortext.indexing.embeddings import EmbeddingModel
from vectortext.indexing.pipeline import EmbeddingIndexer, IndexingJob
from vectortext.retrieval import MessageSearchService

logger = get_logger(__name__)

_DB: SQLiteDatabase | None = None
_STORE: SQLiteMessageStore | None = None
_CORPUS_CACHE: CorpusCache | None = None
_INDEXING_JOB: IndexingJob | None = None
_SEARCH_SERVICE: MessageSearchService | None = None
_EMBEDDING_MODEL = EmbeddingModel()


@lru_cache(maxsize=1)
def get_app_settings() -> Settings:
    return get_settings()


def get_database() -> SQLiteDatabase:
    global _DB
    if _DB is None:
        settings = get_app_settings()
        db = SQLiteDatabase(settings.db_path)
        db.ensure_schema()
        _DB = db
    return _DB


def get_message_store() -> SQLiteMessageStore:
    global _STORE
    if _STORE is None:
        _STORE = SQLiteMessageStore(get_database())
    return _STORE


def get_embedding_model() -> EmbeddingModel:
    return _EMBEDDING_MODEL


def get_corpus_cache() -> CorpusCache:
    global _CORPUS_CACHE
    if _CORPUS_CACHE is None:
        _CORPUS_CACHE = CorpusCache()
    return _CORPUS_CACHE


def get_indexing_job() -> IndexingJob:
    global _INDEXING_JOB
    if _INDEXING_JOB is None:
        indexer = EmbeddingIndexer(
            store=get_message_store(),
            corpus_cache=get_corpus_cache(),
            settings=get_app_settings(),
            embedding_model=get_embedding_model(),
        )
        _INDEXING_JOB = IndexingJob(indexer)
    return _INDEXING_JOB


def get_search_service() -> MessageSearchService:
    global _SEARCH_SERVICE
    if _SEARCH_SERVICE is None:
        _SEARCH_SERVICE = MessageSearchService(
            store=get_message_store(),
            corpus_cache=get_corpus_cache(),
            settings=get_app_settings(),
            embedding_model=get_embedding_model(),
        )
    return _SEARCH_SERVICE


def warm_corpus_cache() -> None:
    """Build an initial corpus snapshot so queries before the first run use real IDF weights."""
    cache = get_corpus_cache()
    if cache.is_warm:
        return
    try:
        cache.warm(get_message_store())
    except Exception:
        logger.exception("Initial corpus snapshot failed; queries use unit IDF weights until indexing runs")


def reset_state() -> None:
    """Drop cached singletons; used by tests and on shutdown."""
    global _DB, _STORE, _CORPUS_CACHE, _INDEXING_JOB, _SEARCH_SERVICE
    if _INDEXING_JOB is not None:
        _INDEXING_JOB.cancel()
        _INDEXING_JOB.wait(timeout=5)
    if _DB is not None:
        _DB.close()
    get_app_settings.cache_clear()
    get_settings.cache_clear()
    _DB = None
    _STORE = None
    _CORPUS_CACHE = None
    _INDEXING_JOB = None
    _SEARCH_SERVICE = None


__all__ = [
    "get_app_settings",
    "get_database",
    "get_message_store",
    "get_embedding_model",
    "get_corpus_cache",
    "get_indexing_job",
    "get_search_service",
    "warm_corpus_cache",
    "reset_state",
]
