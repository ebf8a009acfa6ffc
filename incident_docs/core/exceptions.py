"""
Exception hierarchy for the incident document service.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class IncidentDocsException(Exception):
    """Base exception for all incident document service errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(IncidentDocsException):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class DocumentNotFoundError(IncidentDocsException):
    """Raised when a document record cannot be found or is soft-deleted."""

    def __init__(self, document_id: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["document_id"] = document_id
        super().__init__(f"Document not found: {document_id}", details)


class DocumentProcessingError(IncidentDocsException):
    """Base exception for failures inside one ingestion attempt."""

    def __init__(
        self,
        message: str,
        document_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if document_id:
            details["document_id"] = document_id
        super().__init__(message, details)


class FetchError(DocumentProcessingError):
    """
    Raised when a remote source cannot be downloaded.

    Attributes:
        error_code: Classified failure category (ErrorCode)
        status_code: HTTP status when the server answered, else None
    """

    def __init__(
        self,
        message: str,
        error_code: Any,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details["error_code"] = getattr(error_code, "value", error_code)
        if status_code is not None:
            details["status_code"] = status_code
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message, details=details)


class StorageError(IncidentDocsException):
    """Raised when an object storage operation fails."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize storage error.

        Args:
            message: Error message
            operation: Operation that failed (put, get, move, delete, sign)
            path: Object key involved
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        if path:
            details["path"] = path
        self.operation = operation
        super().__init__(message, details)


class StagingError(IncidentDocsException):
    """Raised when a staged upload cannot be claimed, moved or discarded."""

    def __init__(
        self,
        message: str,
        upload_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if upload_id:
            details["upload_id"] = upload_id
        super().__init__(message, details)
