"""
Document API schemas.

Request/response schemas for document read and maintenance operations.

Dependencies: pydantic
System role: Document API contracts
"""

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from incident_docs.boundary.db.models.document_model import (
    DocumentCategory,
    DocumentStatus,
    ErrorCode,
)


class DocumentResponse(BaseModel):
    """Document record as exposed to API callers."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    owner_id: str
    document_kind: str
    document_category: DocumentCategory
    source_type: str
    source_field: str | None = None
    associated_with: str | None = None
    associated_id: str | None = None
    original_filename: str | None = None
    storage_bucket: str | None = None
    storage_path: str | None = None
    file_size: int | None = None
    mime_type: str | None = None
    original_checksum: str | None = None
    current_checksum: str | None = None
    status: DocumentStatus
    retry_count: int
    max_retries: int
    next_retry_at: datetime | None = None
    error_code: ErrorCode | None = None
    error_message: str | None = None
    error_details: dict[str, Any] | None = None
    signed_url: str | None = None
    signed_url_expires_at: datetime | None = None
    is_permanently_failed: bool = False
    created_at: datetime
    updated_at: datetime


class DocumentListResponse(BaseModel):
    """Paginated document list response."""

    documents: list[DocumentResponse]
    total: int
    limit: int | None = None
    offset: int = 0


class SignedUrlRequest(BaseModel):
    """Request schema for reissuing a signed URL."""

    ttl_seconds: int | None = Field(
        default=None,
        gt=0,
        description="One-off URL lifetime; omit to reissue the stored long-lived URL",
    )


class SignedUrlResponse(BaseModel):
    """Freshly issued signed URL."""

    document_id: uuid.UUID
    signed_url: str
    expires_at: datetime
    stored: bool = True


class IntegrityReport(BaseModel):
    """Result of re-hashing a stored document."""

    document_id: uuid.UUID
    original_checksum: str
    current_checksum: str
    matches: bool
    verified_at: datetime
