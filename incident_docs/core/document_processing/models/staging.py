"""
Staging workflow models.

Dependencies: pydantic
System role: Return types for StagingWorkflow
"""

import enum
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class StagedUpload(BaseModel):
    """A file uploaded during a form session, not yet claimed."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    session_id: str
    field_name: str
    original_filename: str | None = None
    storage_path: str
    file_size: int
    mime_type: str
    checksum: str
    expires_at: datetime
    claimed: bool = False


class FinalizeStatus(str, enum.Enum):
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


class StagedDocumentResult(BaseModel):
    """Outcome of finalizing one staged upload."""

    upload_id: UUID
    field_name: str
    status: FinalizeStatus
    document_id: UUID | None = None
    storage_path: str | None = None
    signed_url: str | None = None
    error: str | None = None


class FinalizeResult(BaseModel):
    """Per-field outcomes of finalizing a form session."""

    session_id: str
    results: list[StagedDocumentResult] = Field(default_factory=list)

    @property
    def completed(self) -> int:
        return sum(1 for r in self.results if r.status == FinalizeStatus.COMPLETED)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if r.status == FinalizeStatus.FAILED)
