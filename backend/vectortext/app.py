"""FastAPI application setup for VectorText."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from vectortext.api.dependencies import (
    get_app_settings,
    get_indexing_job,
    get_search_service,
    reset_state,
    warm_corpus_cache,
)
from vectortext.api.routes_admin import router as admin_router
from vectortext.api.routes_index import router as index_router
from vectortext.api.routes_search import router as search_router
from vectortext.core.errors import CorpusReadError
from vectortext.core.logging import configure_logging, get_logger

configure_logging()
logger = get_logger(__name__)

app = FastAPI(
    title="VectorText",
    version="0.1.0",
    description="Semantic search over a local message store",
)

app.include_router(search_router, tags=["search"])
app.include_router(index_router, prefix="/index", tags=["index"])
app.include_router(admin_router, tags=["admin"])


@app.exception_handler(CorpusReadError)
async def store_unavailable(request: Request, exc: CorpusReadError) -> JSONResponse:
    logger.error("Message store unreadable while serving %s", request.url.path, exc_info=exc)
    return JSONResponse(status_code=503, content={"detail": str(exc)})


@app.on_event("startup")
async def startup() -> None:
    """Open the store and build the initial corpus snapshot."""
    get_app_settings()
    warm_corpus_cache()
    get_indexing_job()
    get_search_service()


@app.on_event("shutdown")
async def shutdown() -> None:
    reset_state()


@app.get("/health", tags=["admin"])
def health() -> dict[str, bool]:
    return {"ok": True}
