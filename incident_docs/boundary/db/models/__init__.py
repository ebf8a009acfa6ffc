"""ORM models for the document metadata store."""

from incident_docs.boundary.db.models.document_model import (
    DocumentCategory,
    DocumentModel,
    DocumentStatus,
    ErrorCode,
)
from incident_docs.boundary.db.models.temp_upload_model import TempUploadModel

__all__ = [
    "DocumentCategory",
    "DocumentModel",
    "DocumentStatus",
    "ErrorCode",
    "TempUploadModel",
]
