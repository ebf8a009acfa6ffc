"""
Staging API schemas.

Dependencies: pydantic
System role: Staging API contracts
"""

from pydantic import BaseModel, Field

from incident_docs.boundary.db.models.document_model import DocumentCategory


class FinalizeRequest(BaseModel):
    """Request schema for turning a session's staged uploads into documents."""

    owner_id: str = Field(..., min_length=1)
    associated_id: str = Field(..., min_length=1, description="Incident or form id")
    category: DocumentCategory = Field(default=DocumentCategory.INCIDENT_REPORT)
    associated_with: str | None = Field(default=None, description="e.g. incident")
