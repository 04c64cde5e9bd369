"""Pydantic DTOs exposed via API and tool-call adapters."""

from __future__ import annotations

import math
from typing import Any, Literal, Mapping

from pydantic import BaseModel, Field, field_validator

from vectortext.retrieval.search import (
    DEFAULT_MAX_RESULTS,
    DEFAULT_SIMILARITY_THRESHOLD,
    SearchResult,
    clamp_max_results,
    clamp_threshold,
)


def _coerce_number(value: Any, default: float) -> float:
    """Best-effort numeric conversion for loosely typed tool arguments."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return default
    else:
        return default
    return number if math.isfinite(number) else default


class SearchRequest(BaseModel):
    """Validated search parameters.

    ``max_results`` is clamped into ``[1, 20]`` and ``similarity_threshold``
    into ``[0.0, 1.0]``; unusable values fall back to the defaults.
    """

    query: str
    max_results: int = DEFAULT_MAX_RESULTS
    similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD

    @field_validator("query")
    @classmethod
    def _require_query(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Query cannot be empty")
        return value

    @field_validator("max_results", mode="before")
    @classmethod
    def _clamp_max_results(cls, value: Any) -> int:
        return clamp_max_results(int(_coerce_number(value, DEFAULT_MAX_RESULTS)))

    @field_validator("similarity_threshold", mode="before")
    @classmethod
    def _clamp_threshold(cls, value: Any) -> float:
        return clamp_threshold(_coerce_number(value, DEFAULT_SIMILARITY_THRESHOLD))

    @classmethod
    def from_arguments(cls, arguments: Mapping[str, Any]) -> "SearchRequest":
        """Build a request from an untyped argument map (e.g. a tool call)."""
        query = arguments.get("query")
        if not isinstance(query, str):
            raise ValueError("Missing required parameter: query")
        return cls(
            query=query,
            max_results=arguments.get("max_results"),
            similarity_threshold=arguments.get("similarity_threshold"),
        )


class SearchResultItem(BaseModel):
    message_id: int
    thread_id: int
    sender: str
    timestamp: int
    snippet: str
    similarity: float = Field(ge=0.0, le=1.0)

    @classmethod
    def from_result(cls, result: SearchResult) -> "SearchResultItem":
        return cls(**result.to_dict())


class SearchResponse(BaseModel):
    query: str
    threshold: float
    found: bool
    count: int
    results: list[SearchResultItem]
    message: str | None = None

    @classmethod
    def from_results(cls, request: SearchRequest, results: list[SearchResult]) -> "SearchResponse":
        message = None
        if not results:
            message = (
                "No messages found matching the query. "
                "Try lowering the similarity threshold or using different search terms."
            )
        return cls(
            query=request.query,
            threshold=request.similarity_threshold,
            found=bool(results),
            count=len(results),
            results=[SearchResultItem.from_result(result) for result in results],
            message=message,
        )


class ContextRequest(BaseModel):
    query: str = Field(min_length=1)
    max_results: int = Field(default=3, ge=1, le=20)
    max_chars: int = Field(default=1000, ge=1)


class ContextResponse(BaseModel):
    query: str
    context: str | None


class IndexStatusResponse(BaseModel):
    running: bool
    state: str
    progress: dict[str, Any] | None = None
    last_outcome: dict[str, Any] | None = None


class IndexStartResponse(BaseModel):
    status: Literal["started"]


class IndexCancelResponse(BaseModel):
    cancelled: bool


class StatsResponse(BaseModel):
    total_messages: int
    embedded_messages: int
    embedding_dimension: int
    embedding_version: int
    corpus: dict[str, Any] | None = None


__all__ = [
    "SearchRequest",
    "SearchResultItem",
    "SearchResponse",
    "ContextRequest",
    "ContextResponse",
    "IndexStatusResponse",
    "IndexStartResponse",
    "IndexCancelResponse",
    "StatsResponse",
]
