"""Tests for the SQLite message store."""

from __future__ import annotations

from typing import Callable

import pytest

from vectortext.core.errors import EmbeddingPersistenceError
from vectortext.db.message_store import SQLiteMessageStore
from vectortext.db.sqlite import SQLiteDatabase


def test_add_and_get_message(store: SQLiteMessageStore) -> None:
    message_id = store.add_message(7, "+15550100", "gate code is 4521", 1_700_000_000_000)

    message = store.get_message(message_id)
    assert message is not None
    assert message.thread_id == 7
    assert message.sender == "+15550100"
    assert message.body == "gate code is 4521"
    assert message.timestamp == 1_700_000_000_000
    assert message.embedding is None
    assert not message.has_embedding
    assert store.get_message(message_id + 100) is None


def test_list_pending_orders_newest_first(store: SQLiteMessageStore) -> None:
    old = store.add_message(1, "a", "old message", 1000)
    new = store.add_message(1, "a", "new message", 3000)
    middle = store.add_message(1, "a", "middle message", 2000)

    assert store.list_pending(1) == [new, middle, old]


def test_list_pending_skips_current_version(store: SQLiteMessageStore) -> None:
    done = store.add_message(1, "a", "done", 1000)
    stale = store.add_message(1, "a", "stale", 2000)
    missing = store.add_message(1, "a", "missing", 3000)
    store.update_embedding(done, "0.5,0.5", 1, 10)
    store.update_embedding(stale, "0.5,0.5", 0, 10)

    assert store.list_pending(1) == [missing, stale]


def test_fetch_pending_keeps_requested_order(store: SQLiteMessageStore) -> None:
    first = store.add_message(1, "a", "first body", 1000)
    second = store.add_message(1, "a", "second body", 2000)

    batch = store.fetch_pending([second, first + 100, first])

    assert [(item.id, item.body) for item in batch] == [(second, "second body"), (first, "first body")]
    assert store.fetch_pending([]) == []


def test_update_embedding_persists_version_and_timestamp(store: SQLiteMessageStore) -> None:
    message_id = store.add_message(1, "a", "hello there", 1000)
    store.update_embedding(message_id, "0.1,0.2", 1, 123456)

    message = store.get_message(message_id)
    assert message is not None
    assert message.embedding == "0.1,0.2"
    assert message.embedding_version == 1
    assert message.last_indexed == 123456
    assert store.count_embedded() == 1


def test_update_embedding_for_missing_message_raises(store: SQLiteMessageStore) -> None:
    with pytest.raises(EmbeddingPersistenceError) as excinfo:
        store.update_embedding(999, "0.1", 1, 1)
    assert excinfo.value.message_id == 999


def test_iter_all_bodies_includes_empty_bodies(store: SQLiteMessageStore) -> None:
    store.add_message(1, "a", "first", 1000)
    store.add_message(1, "a", "", 2000)
    assert list(store.iter_all_bodies()) == ["first", ""]


def test_iter_embedded_batches_pages_by_id(
    store: SQLiteMessageStore, add_messages: Callable[..., list[int]]
) -> None:
    ids = add_messages([f"message {idx}" for idx in range(6)])
    for message_id in ids[:5]:
        store.update_embedding(message_id, "0.1,0.2", 1, 1)

    batches = list(store.iter_embedded_batches(2))

    assert [len(batch) for batch in batches] == [2, 2, 1]
    assert [row.message_id for batch in batches for row in batch] == ids[:5]


def test_counts(store: SQLiteMessageStore, database: SQLiteDatabase) -> None:
    first = store.add_message(1, "a", "one", 1)
    store.add_message(1, "a", "two", 2)
    store.update_embedding(first, "0.1", 1, 1)
    database.execute("UPDATE messages SET embedding = '' WHERE id != ?", [first])

    assert store.count_messages() == 2
    assert store.count_embedded() == 1
