"""
Core business logic module.

Contains the ingestion pipeline, retry sweeper, staging workflow and the
exception hierarchy.
"""

from incident_docs.core.exceptions import (
    DocumentNotFoundError,
    DocumentProcessingError,
    FetchError,
    IncidentDocsException,
    StagingError,
    StorageError,
    ValidationError,
)

__all__ = [
    "DocumentNotFoundError",
    "DocumentProcessingError",
    "FetchError",
    "IncidentDocsException",
    "StagingError",
    "StorageError",
    "ValidationError",
]
