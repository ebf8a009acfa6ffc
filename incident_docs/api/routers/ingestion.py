"""
Ingestion API endpoints.

Routes:
- POST /ingestions - Fetch and store one remote document
- POST /ingestions/batch - Fetch and store every document of one submission

Both routes answer 200 with the per-document outcome; a failed fetch is a
result, not an HTTP error.

Dependencies: incident_docs.core.document_processing
System role: Ingestion HTTP API
"""

import logging

from fastapi import APIRouter, Depends

from incident_docs.api.deps import get_orchestrator
from incident_docs.core.document_processing import IngestionOrchestrator
from incident_docs.core.document_processing.models import (
    BatchIngestionRequest,
    BatchIngestionResult,
    IngestionRequest,
    IngestionResult,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ingestions", tags=["ingestions"])


@router.post("", response_model=IngestionResult)
async def create_ingestion(
    request: IngestionRequest,
    orchestrator: IngestionOrchestrator = Depends(get_orchestrator),
) -> IngestionResult:
    """
    Ingest one remote document synchronously.

    Args:
        request: Owner, kind, category and source URL
        orchestrator: Injected IngestionOrchestrator

    Returns:
        IngestionResult: completed, or failed with error code and retry schedule
    """
    return await orchestrator.create_ingestion(request)


@router.post("/batch", response_model=BatchIngestionResult)
async def create_batch_ingestion(
    batch: BatchIngestionRequest,
    orchestrator: IngestionOrchestrator = Depends(get_orchestrator),
) -> BatchIngestionResult:
    """
    Ingest all documents of one form submission concurrently.

    Args:
        batch: Shared owner/context plus one entry per document
        orchestrator: Injected IngestionOrchestrator

    Returns:
        BatchIngestionResult: Per-document results with completed/failed counts
    """
    result = await orchestrator.ingest_batch(batch)
    if result.failed:
        logger.info(
            "Batch ingestion finished with failures",
            extra={"owner_id": batch.owner_id, "failed_fields": result.failed_fields},
        )
    return result
