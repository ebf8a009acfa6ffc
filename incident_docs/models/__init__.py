"""API request and response schemas."""

from incident_docs.models.document import (
    DocumentListResponse,
    DocumentResponse,
    IntegrityReport,
    SignedUrlRequest,
    SignedUrlResponse,
)
from incident_docs.models.staging import FinalizeRequest

__all__ = [
    "DocumentListResponse",
    "DocumentResponse",
    "FinalizeRequest",
    "IntegrityReport",
    "SignedUrlRequest",
    "SignedUrlResponse",
]
