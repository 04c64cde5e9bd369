"""Search API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from vectortext.api.dependencies import get_search_service
from vectortext.models.dto import ContextRequest, ContextResponse, SearchRequest, SearchResponse
from vectortext.retrieval import MessageSearchService, build_context

router = APIRouter()


@router.post("/search", response_model=SearchResponse, summary="Semantic search over indexed messages")
def search_messages(
    request: SearchRequest,
    service: MessageSearchService = Depends(get_search_service),
) -> SearchResponse:
    results = service.search(
        request.query,
        max_results=request.max_results,
        threshold=request.similarity_threshold,
    )
    return SearchResponse.from_results(request, results)


@router.post("/context", response_model=ContextResponse, summary="Build a prompt context block from matches")
def message_context(
    request: ContextRequest,
    service: MessageSearchService = Depends(get_search_service),
) -> ContextResponse:
    context = build_context(service, request.query, max_results=request.max_results, max_chars=request.max_chars)
    return ContextResponse(query=request.query, context=context)
