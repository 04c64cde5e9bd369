"""CLI entrypoint for VectorText."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import orjson
import typer

from vectortext.api.dependencies import (
    get_corpus_cache,
    get_embedding_model,
    get_indexing_job,
    get_message_store,
    get_search_service,
    warm_corpus_cache,
)
from vectortext.indexing.types import IndexingOutcome, IndexingProgress, IndexingState
from vectortext.retrieval import format_results
from vectortext.retrieval.search import DEFAULT_MAX_RESULTS, DEFAULT_SIMILARITY_THRESHOLD
from vectortext.utils.time import now_ms

app = typer.Typer(name="vtxt", help="VectorText command-line interface")


class _EchoListener:
    def on_progress(self, progress: IndexingProgress) -> None:
        typer.echo(f"[{progress.state.value}] {progress.message}")

    def on_finished(self, outcome: IndexingOutcome) -> None:
        pass


@app.command()
def add(
    body: str = typer.Argument(..., help="Message text"),
    thread: int = typer.Option(1, "--thread", help="Thread identifier"),
    sender: str = typer.Option("", "--sender", help="Sender address"),
    timestamp: Optional[int] = typer.Option(None, "--timestamp", help="Epoch milliseconds; defaults to now"),
) -> None:
    """Store a single message."""
    message_id = get_message_store().add_message(thread, sender, body, timestamp or now_ms())
    typer.echo(json.dumps({"id": message_id}))


@app.command("import")
def import_messages(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON array of message objects"),
) -> None:
    """Load messages from a JSON file with thread_id, sender, body and timestamp keys."""
    records = orjson.loads(path.expanduser().read_bytes())
    if not isinstance(records, list):
        typer.echo("Expected a JSON array of messages", err=True)
        raise typer.Exit(code=1)
    store = get_message_store()
    imported = 0
    for record in records:
        store.add_message(
            int(record.get("thread_id", 1)),
            str(record.get("sender", "")),
            str(record.get("body", "")),
            int(record.get("timestamp") or now_ms()),
        )
        imported += 1
    typer.echo(json.dumps({"imported": imported}))


@app.command()
def index() -> None:
    """Embed every message that lacks a current embedding."""
    job = get_indexing_job()
    outcome = job.indexer.run(listener=_EchoListener())
    typer.echo(json.dumps(outcome.to_dict(), indent=2))
    if outcome.state is IndexingState.FAILED:
        raise typer.Exit(code=1)


@app.command()
def search(
    q: str = typer.Argument(..., help="Query text"),
    max_results: int = typer.Option(DEFAULT_MAX_RESULTS, "--max-results", "-k", help="Number of results (1-20)"),
    threshold: float = typer.Option(DEFAULT_SIMILARITY_THRESHOLD, "--threshold", help="Minimum similarity (0-1)"),
    as_json: bool = typer.Option(False, "--json", help="Emit JSON instead of text"),
) -> None:
    """Search indexed messages by meaning.

    Corpus statistics are not rebuilt per query: a fresh CLI process
    weighs query terms with unit IDF, while the HTTP service uses the
    snapshot from its last indexing run.
    """
    results = get_search_service().search(q, max_results=max_results, threshold=threshold)
    if as_json:
        typer.echo(json.dumps([result.to_dict() for result in results], indent=2))
        return
    if not results:
        typer.echo("No messages found matching the query.")
        return
    typer.echo(format_results(results))


@app.command()
def stats() -> None:
    """Show index coverage and corpus statistics."""
    store = get_message_store()
    warm_corpus_cache()
    payload = {
        "total_messages": store.count_messages(),
        "embedded_messages": store.count_embedded(),
        "embedding_dimension": get_embedding_model().dim,
        "corpus": get_corpus_cache().get().describe(),
    }
    typer.echo(json.dumps(payload, indent=2))


if __name__ == "__main__":
    app()
