"""Indexing control routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from vectortext.api.dependencies import get_indexing_job
from vectortext.core.errors import IndexingInProgressError
from vectortext.indexing.pipeline import IndexingJob
from vectortext.models.dto import IndexCancelResponse, IndexStartResponse, IndexStatusResponse

router = APIRouter()


@router.post("", response_model=IndexStartResponse, status_code=202, summary="Start an indexing run")
def start_indexing(job: IndexingJob = Depends(get_indexing_job)) -> IndexStartResponse:
    try:
        job.start()
    except IndexingInProgressError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return IndexStartResponse(status="started")


@router.get("/status", response_model=IndexStatusResponse, summary="Progress of the current or last run")
def indexing_status(job: IndexingJob = Depends(get_indexing_job)) -> IndexStatusResponse:
    return IndexStatusResponse(**job.status())


@router.post("/cancel", response_model=IndexCancelResponse, summary="Request cancellation of the active run")
def cancel_indexing(job: IndexingJob = Depends(get_indexing_job)) -> IndexCancelResponse:
    return IndexCancelResponse(cancelled=job.cancel())
