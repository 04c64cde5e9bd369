"""Test fixtures for VectorText."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, Sequence

import pytest

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from vectortext.core.config import Settings  # noqa: E402
from vectortext.db.message_store import SQLiteMessageStore  # noqa: E402
from vectortext.db.sqlite import SQLiteDatabase  # noqa: E402
from vectortext.indexing.corpus import CorpusCache  # noqa: E402
from vectortext.indexing.embeddings import EmbeddingModel  # noqa: E402
from vectortext.indexing.pipeline import EmbeddingIndexer  # noqa: E402
from vectortext.retrieval.search import MessageSearchService  # noqa: E402

BASE_TIMESTAMP = 1_700_000_000_000


@pytest.fixture(autouse=True)
def reset_state(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Reset global singletons and environment between tests."""
    monkeypatch.setenv("VTXT_DB_PATH", str(tmp_path / "app.db"))
    monkeypatch.delenv("VTXT_CONFIG", raising=False)

    from vectortext.api import dependencies as deps

    deps.reset_state()
    yield
    deps.reset_state()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(db_path=tmp_path / "messages.db")


@pytest.fixture
def database(settings: Settings) -> SQLiteDatabase:
    db = SQLiteDatabase(settings.db_path)
    db.ensure_schema()
    yield db
    db.close()


@pytest.fixture
def store(database: SQLiteDatabase) -> SQLiteMessageStore:
    return SQLiteMessageStore(database)


@pytest.fixture
def corpus_cache() -> CorpusCache:
    return CorpusCache()


@pytest.fixture
def model() -> EmbeddingModel:
    return EmbeddingModel()


@pytest.fixture
def indexer(
    store: SQLiteMessageStore,
    corpus_cache: CorpusCache,
    settings: Settings,
    model: EmbeddingModel,
) -> EmbeddingIndexer:
    return EmbeddingIndexer(store=store, corpus_cache=corpus_cache, settings=settings, embedding_model=model)


@pytest.fixture
def search_service(
    store: SQLiteMessageStore,
    corpus_cache: CorpusCache,
    settings: Settings,
    model: EmbeddingModel,
) -> MessageSearchService:
    return MessageSearchService(store=store, corpus_cache=corpus_cache, settings=settings, embedding_model=model)


@pytest.fixture
def add_messages(store: SQLiteMessageStore) -> Callable[..., list[int]]:
    """Insert bodies with increasing timestamps and return their ids."""

    def _add(bodies: Sequence[str], thread_id: int = 1, sender: str = "+15550100") -> list[int]:
        base = BASE_TIMESTAMP + store.count_messages() * 1000
        return [
            store.add_message(thread_id, sender, body, base + offset * 1000)
            for offset, body in enumerate(bodies)
        ]

    return _add
