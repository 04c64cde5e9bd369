"""CLI tests."""

from __future__ import annotations

from pathlib import Path

import orjson
import pytest
from typer.testing import CliRunner

from vectortext.api import dependencies as deps
from vectortext.cli.main import app
from vectortext.indexing.corpus import CorpusStatistics

runner = CliRunner()


def test_add_index_and_search() -> None:
    added = runner.invoke(app, ["add", "the gate code is 4521", "--thread", "3", "--sender", "alice"])
    assert added.exit_code == 0, added.output
    assert '"id": 1' in added.output

    indexed = runner.invoke(app, ["index"])
    assert indexed.exit_code == 0, indexed.output
    assert '"state": "completed"' in indexed.output

    found = runner.invoke(app, ["search", "gate code", "--json"])
    assert found.exit_code == 0, found.output
    assert '"message_id": 1' in found.output

    text = runner.invoke(app, ["search", "gate code"])
    assert "From: alice" in text.output


def test_search_without_matches() -> None:
    result = runner.invoke(app, ["search", "gate code"])
    assert result.exit_code == 0
    assert "No messages found" in result.output


def test_import_and_stats(tmp_path: Path) -> None:
    source = tmp_path / "messages.json"
    source.write_bytes(
        orjson.dumps(
            [
                {"thread_id": 1, "sender": "bob", "body": "roof repair budget", "timestamp": 1000},
                {"thread_id": 2, "sender": "carol", "body": "thanks for dinner", "timestamp": 2000},
            ]
        )
    )

    imported = runner.invoke(app, ["import", str(source)])
    assert imported.exit_code == 0, imported.output
    assert '"imported": 2' in imported.output

    stats = runner.invoke(app, ["stats"])
    assert stats.exit_code == 0, stats.output
    assert '"total_messages": 2' in stats.output
    assert '"embedded_messages": 0' in stats.output


def test_import_rejects_non_array(tmp_path: Path) -> None:
    source = tmp_path / "messages.json"
    source.write_bytes(orjson.dumps({"body": "not a list"}))

    result = runner.invoke(app, ["import", str(source)])
    assert result.exit_code == 1


def test_search_in_fresh_process_skips_corpus_rebuild(monkeypatch: pytest.MonkeyPatch) -> None:
    runner.invoke(app, ["add", "the gate code is 4521"])
    runner.invoke(app, ["index"])
    deps.reset_state()

    def rebuild(cls, bodies):
        raise AssertionError("corpus statistics rebuilt for a query")

    monkeypatch.setattr(CorpusStatistics, "build", classmethod(rebuild))

    result = runner.invoke(app, ["search", "gate code", "--json"])

    assert result.exit_code == 0, result.output
    assert '"message_id": 1' in result.output
    assert not deps.get_corpus_cache().is_warm
