"""Formatting of search hits for display and assistant prompts."""

from __future__ import annotations

from typing import Sequence

from vectortext.retrieval.search import DEFAULT_SIMILARITY_THRESHOLD, MessageSearchService, SearchResult
from vectortext.utils.time import ms_to_datetime

_DATE_FORMAT = "%b %d, %Y at %I:%M %p"


def format_timestamp(timestamp: int) -> str:
    return ms_to_datetime(timestamp).strftime(_DATE_FORMAT)


def format_result(result: SearchResult) -> str:
    """Render one hit as a short human-readable block."""
    relevance = int(result.similarity * 100)
    return "\n".join(
        [
            f"[{relevance}% relevant]",
            f"From: {result.sender}",
            f"Date: {format_timestamp(result.timestamp)}",
            f"Message: {result.snippet}",
        ]
    )


def format_results(results: Sequence[SearchResult]) -> str:
    return "\n\n---\n\n".join(format_result(result) for result in results)


def build_context(
    service: MessageSearchService,
    query: str,
    max_results: int = 3,
    max_chars: int = 1000,
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
) -> str | None:
    """Concatenate the best matches for ``query`` into a bounded context block.

    Blocks are appended in rank order until the next one would push the text
    past ``max_chars``. Returns ``None`` when nothing clears the threshold.
    """
    results = service.search(query, max_results=max_results, threshold=threshold)
    if not results:
        return None
    parts = ["Relevant messages:\n"]
    length = len(parts[0])
    for index, result in enumerate(results, start=1):
        block = (
            f"Message {index}:\n"
            f"From: {result.sender}\n"
            f"Date: {format_timestamp(result.timestamp)}\n"
            f"Content: {result.body}\n"
        )
        if length + len(block) > max_chars:
            break
        parts.append(block)
        length += len(block)
    if len(parts) == 1:
        return None
    return "\n".join(parts).strip()


__all__ = ["build_context", "format_result", "format_results", "format_timestamp"]
