"""
Retry API endpoints.

Routes:
- POST /retries/sweep - Run one retry pass now
- GET /retries/candidates - Records the next sweep would pick (dry run)
- GET /retries/statistics - Retry bookkeeping across documents
- POST /retries/{document_id} - Retry one document regardless of its backoff

Dependencies: incident_docs.core.document_processing
System role: Retry HTTP API
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query

from incident_docs.api.deps import get_sweeper
from incident_docs.core.document_processing import RetrySweeper
from incident_docs.core.document_processing.models import (
    RetryCandidate,
    RetryOutcome,
    RetryStatistics,
    SweepSummary,
)
from incident_docs.core.exceptions import DocumentNotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/retries", tags=["retries"])


@router.post("/sweep", response_model=SweepSummary)
async def run_sweep(
    limit: int | None = Query(default=None, gt=0, le=500),
    sweeper: RetrySweeper = Depends(get_sweeper),
) -> SweepSummary:
    """
    Run one retry sweep synchronously.

    Args:
        limit: Maximum records to pick (defaults to INGESTION_SWEEP_BATCH_LIMIT)
        sweeper: Injected RetrySweeper

    Returns:
        SweepSummary: Counts and per-record outcomes
    """
    return await sweeper.sweep(limit=limit)


@router.get("/candidates", response_model=list[RetryCandidate])
async def list_candidates(
    limit: int | None = Query(default=None, gt=0, le=500),
    sweeper: RetrySweeper = Depends(get_sweeper),
) -> list[RetryCandidate]:
    """List records due for retry without touching them."""
    return await sweeper.preview(limit=limit)


@router.get("/statistics", response_model=RetryStatistics)
async def get_statistics(sweeper: RetrySweeper = Depends(get_sweeper)) -> RetryStatistics:
    """Retry statistics across all non-deleted documents."""
    return await sweeper.get_retry_statistics()


@router.post("/{document_id}", response_model=RetryOutcome)
async def retry_document(
    document_id: UUID,
    sweeper: RetrySweeper = Depends(get_sweeper),
) -> RetryOutcome:
    """
    Retry one document now.

    Args:
        document_id: Document UUID
        sweeper: Injected RetrySweeper

    Returns:
        RetryOutcome: completed, failed, permanently_failed or already_completed

    Raises:
        HTTPException(404): Document not found or deleted
    """
    try:
        return await sweeper.retry_document_by_id(document_id)
    except DocumentNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
