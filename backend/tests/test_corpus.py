"""Tests for corpus statistics and the snapshot cache."""

from __future__ import annotations

import math

import pytest

from vectortext.db.message_store import SQLiteMessageStore
from vectortext.indexing.corpus import DEFAULT_IDF, CorpusCache, CorpusStatistics


def test_build_computes_smoothed_idf() -> None:
    stats = CorpusStatistics.build(["pizza tonight", "pizza party", "budget review"])

    assert stats.document_count == 3
    assert stats.idf("pizza") == pytest.approx(math.log(4 / 3) + 1.0)
    assert stats.idf("tonight") == pytest.approx(math.log(4 / 2) + 1.0)
    assert stats.idf("pizza") < stats.idf("budget")


def test_document_frequency_counts_each_body_once() -> None:
    stats = CorpusStatistics.build(["pizza pizza pizza", "salad"])
    assert stats.idf("pizza") == pytest.approx(stats.idf("salad"))


def test_unknown_term_defaults_to_unit_weight() -> None:
    stats = CorpusStatistics.build(["pizza tonight"])
    assert stats.idf("unseen") == DEFAULT_IDF
    assert CorpusStatistics.empty().idf("pizza") == DEFAULT_IDF


def test_empty_bodies_count_as_documents() -> None:
    stats = CorpusStatistics.build(["", "pizza"])
    assert stats.document_count == 2
    assert stats.vocabulary_size == 1


def test_snapshot_is_read_only() -> None:
    stats = CorpusStatistics.build(["pizza"])
    with pytest.raises(TypeError):
        stats.idf_weights["pizza"] = 10.0  # type: ignore[index]


def test_describe_reports_corpus_shape() -> None:
    info = CorpusStatistics.build(["pizza tonight", "budget"]).describe()
    assert info["total_documents"] == 2
    assert info["unique_words"] == 3
    assert info["min_word_length"] == 3
    assert info["stop_words_count"] > 0
    assert info["built_at"] is not None


def test_cache_returns_empty_snapshot_until_warmed(store: SQLiteMessageStore) -> None:
    cache = CorpusCache()
    assert not cache.is_warm
    assert cache.get().document_count == 0

    store.add_message(1, "alice", "pizza tonight", 1000)
    stats = cache.warm(store)

    assert cache.is_warm
    assert stats.document_count == 1


def test_warm_keeps_existing_snapshot(store: SQLiteMessageStore) -> None:
    cache = CorpusCache(CorpusStatistics.build(["one body", "two body"]))
    store.add_message(1, "alice", "pizza tonight", 1000)

    assert cache.warm(store).document_count == 2


def test_replace_swaps_snapshot() -> None:
    cache = CorpusCache()
    cache.replace(CorpusStatistics.build(["alpha", "beta", "gamma"]))
    assert cache.get().document_count == 3
