"""
Document API endpoints.

Routes:
- GET /owners/{owner_id}/documents - List an owner's documents
- GET /documents/{id} - Get one document
- POST /documents/{id}/signed-url - Reissue a signed URL
- POST /documents/{id}/verify - Re-hash the stored object
- DELETE /documents/{id} - Soft-delete a document

Dependencies: incident_docs.application.services, incident_docs.models
System role: Document HTTP API
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query

from incident_docs.api.deps import get_document_service
from incident_docs.application.services.document_service import DocumentService
from incident_docs.boundary.db.models.document_model import DocumentCategory, DocumentStatus
from incident_docs.core.exceptions import DocumentNotFoundError, StorageError, ValidationError
from incident_docs.models.document import (
    DocumentListResponse,
    DocumentResponse,
    IntegrityReport,
    SignedUrlRequest,
    SignedUrlResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["documents"])


@router.get("/owners/{owner_id}/documents", response_model=DocumentListResponse)
async def list_owner_documents(
    owner_id: str,
    status: DocumentStatus | None = None,
    document_kind: str | None = None,
    document_category: DocumentCategory | None = None,
    limit: int = Query(default=50, gt=0, le=200),
    offset: int = Query(default=0, ge=0),
    document_service: DocumentService = Depends(get_document_service),
) -> DocumentListResponse:
    """
    List an owner's non-deleted documents, newest first.

    Args:
        owner_id: Owner identifier
        status: Optional status filter
        document_kind: Optional kind filter
        document_category: Optional category filter
        limit: Page size
        offset: Page offset
        document_service: Injected DocumentService

    Returns:
        DocumentListResponse: Page of documents and total count
    """
    documents, total = await document_service.list_owner_documents(
        owner_id,
        status=status,
        document_kind=document_kind,
        document_category=document_category,
        limit=limit,
        offset=offset,
    )
    return DocumentListResponse(
        documents=[DocumentResponse.model_validate(doc) for doc in documents],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/documents/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: UUID,
    document_service: DocumentService = Depends(get_document_service),
) -> DocumentResponse:
    """
    Raises:
        HTTPException(404): Document not found or deleted
    """
    try:
        document = await document_service.get_document(document_id)
    except DocumentNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    return DocumentResponse.model_validate(document)


@router.post("/documents/{document_id}/signed-url", response_model=SignedUrlResponse)
async def refresh_signed_url(
    document_id: UUID,
    request: SignedUrlRequest | None = None,
    document_service: DocumentService = Depends(get_document_service),
) -> SignedUrlResponse:
    """
    Reissue a signed URL for a stored document.

    Args:
        document_id: Document UUID
        request: Optional one-off lifetime (returned, not stored on the record)
        document_service: Injected DocumentService

    Returns:
        SignedUrlResponse: New URL and its expiry

    Raises:
        HTTPException(404): Document not found or deleted
        HTTPException(422): Document has no stored object yet
        HTTPException(502): Signing failed
    """
    ttl_seconds = request.ttl_seconds if request else None
    try:
        return await document_service.refresh_signed_url(document_id, ttl_seconds)
    except DocumentNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.message)
    except StorageError as e:
        logger.error(
            "Signed URL refresh failed",
            extra={"document_id": str(document_id), "error": e.message},
        )
        raise HTTPException(status_code=502, detail="Failed to sign document URL")


@router.post("/documents/{document_id}/verify", response_model=IntegrityReport)
async def verify_document(
    document_id: UUID,
    document_service: DocumentService = Depends(get_document_service),
) -> IntegrityReport:
    """
    Re-hash the stored object and compare it with the digest taken at ingestion.

    Raises:
        HTTPException(404): Document not found or deleted
        HTTPException(422): Document has no stored object yet
        HTTPException(502): Object could not be read
    """
    try:
        return await document_service.verify_integrity(document_id)
    except DocumentNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.message)
    except StorageError as e:
        logger.error(
            "Integrity check could not read object",
            extra={"document_id": str(document_id), "error": e.message},
        )
        raise HTTPException(status_code=502, detail="Failed to read stored document")


@router.delete("/documents/{document_id}", status_code=204)
async def delete_document(
    document_id: UUID,
    document_service: DocumentService = Depends(get_document_service),
) -> None:
    """
    Soft-delete a document. The stored object is kept.

    Raises:
        HTTPException(404): Document not found or already deleted
    """
    try:
        await document_service.soft_delete(document_id)
    except DocumentNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
