"""
Ingestion request models.

Inputs from upstream form handling. source_url is kept as a plain string so
a malformed URL reaches the orchestrator and is reported as a failed result
instead of rejecting the whole submission.

Dependencies: pydantic
System role: Input types for IngestionOrchestrator
"""

from pydantic import BaseModel, Field

from incident_docs.boundary.db.models.document_model import DocumentCategory


class IngestionRequest(BaseModel):
    """One remote document to fetch and store."""

    owner_id: str = Field(..., min_length=1, description="Subject the document belongs to")
    document_kind: str = Field(..., min_length=1, description="e.g. driving_license_picture")
    document_category: DocumentCategory = Field(default=DocumentCategory.USER_SIGNUP)
    source_type: str = Field(default="typeform", description="Upstream system that hosts the file")
    source_url: str = Field(..., description="Remote file location")
    source_field: str | None = Field(default=None, description="Form field that produced the URL")
    associated_with: str | None = Field(default=None, description="Attached entity type")
    associated_id: str | None = Field(default=None, description="Attached entity id")


class BatchDocument(BaseModel):
    """One entry of a multi-document submission."""

    document_kind: str = Field(..., min_length=1)
    source_url: str
    source_field: str | None = None


class BatchIngestionRequest(BaseModel):
    """Several documents from one form submission sharing owner and context."""

    owner_id: str = Field(..., min_length=1)
    documents: list[BatchDocument] = Field(..., min_length=1)
    document_category: DocumentCategory = Field(default=DocumentCategory.USER_SIGNUP)
    source_type: str = Field(default="typeform")
    associated_with: str | None = None
    associated_id: str | None = None

    def to_requests(self) -> list[IngestionRequest]:
        return [
            IngestionRequest(
                owner_id=self.owner_id,
                document_kind=doc.document_kind,
                document_category=self.document_category,
                source_type=self.source_type,
                source_url=doc.source_url,
                source_field=doc.source_field or doc.document_kind,
                associated_with=self.associated_with,
                associated_id=self.associated_id,
            )
            for doc in self.documents
        ]
