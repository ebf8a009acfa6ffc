"""
Ingestion result models.

Dependencies: pydantic
System role: Return types for IngestionOrchestrator
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from incident_docs.boundary.db.models.document_model import (
    DocumentModel,
    DocumentStatus,
    ErrorCode,
)


class IngestionResult(BaseModel):
    """Outcome of one ingestion attempt, mirroring the record's fields."""

    document_id: UUID | None = Field(description="Record id; None when no record was created")
    status: DocumentStatus
    document_kind: str
    source_field: str | None = None
    storage_path: str | None = None
    signed_url: str | None = None
    checksum: str | None = Field(default=None, description="SHA-256 hex of the stored bytes")
    error_code: ErrorCode | None = None
    error_message: str | None = None
    retry_count: int = 0
    next_retry_at: datetime | None = None
    permanently_failed: bool = Field(
        default=False,
        description="True when the document will not be retried automatically",
    )

    @classmethod
    def from_record(cls, record: DocumentModel) -> "IngestionResult":
        return cls(
            document_id=record.id,
            status=record.status,
            document_kind=record.document_kind,
            source_field=record.source_field,
            storage_path=record.storage_path,
            signed_url=record.signed_url,
            checksum=record.current_checksum,
            error_code=record.error_code,
            error_message=record.error_message,
            retry_count=record.retry_count,
            next_retry_at=record.next_retry_at,
            permanently_failed=record.is_permanently_failed,
        )


class BatchIngestionResult(BaseModel):
    """Per-document outcomes of a multi-document submission."""

    results: list[IngestionResult]
    completed: int
    failed: int
    duration_ms: float

    @property
    def failed_fields(self) -> list[str]:
        """Form fields the caller should ask the user to upload again."""
        return [
            r.source_field or r.document_kind
            for r in self.results
            if r.status == DocumentStatus.FAILED
        ]
