"""
Document status updater.

Applies the document state machine on top of the record store:
PENDING → PROCESSING → COMPLETED, or FAILED with retry bookkeeping.
Every transition is persisted before the pipeline moves to its next step.

Dependencies: incident_docs.core.document_processing.database.document_record_store
System role: State machine persistence for the ingestion pipeline
"""

import logging
from datetime import datetime
from typing import Any
from uuid import UUID

from incident_docs.boundary.db.models.document_model import (
    DocumentModel,
    DocumentStatus,
    ErrorCode,
)

logger = logging.getLogger(__name__)

MAX_ERROR_MESSAGE_LENGTH = 2000


def truncate_error(message: str) -> str:
    return message[:MAX_ERROR_MESSAGE_LENGTH]


class DocumentStatusUpdater:
    """Persist document status transitions through a record store."""

    def __init__(self, record_store) -> None:
        """
        Initialize with a record store.

        Args:
            record_store: Object exposing insert(**fields) and update(id, **fields)
        """
        self.store = record_store

    async def _update(self, operation: str, document_id: UUID, **fields: Any) -> DocumentModel:
        try:
            return await self.store.update(document_id, **fields)
        except Exception as e:
            logger.error(
                f"{__name__}:{operation} - {type(e).__name__}: {e}",
                extra={"document_id": str(document_id)},
            )
            raise

    async def create_pending(self, **fields: Any) -> DocumentModel:
        """
        Insert a new record in PENDING.

        Args:
            **fields: Initial column values (owner, kind, source, budget)

        Returns:
            DocumentModel: The created record
        """
        try:
            document = await self.store.insert(
                status=DocumentStatus.PENDING,
                retry_count=0,
                **fields,
            )
        except Exception as e:
            logger.error(
                f"{__name__}:create_pending - {type(e).__name__}: {e}",
                extra={"owner_id": fields.get("owner_id"), "document_kind": fields.get("document_kind")},
            )
            raise

        logger.info(
            f"{__name__}:create_pending - Document created",
            extra={"document_id": str(document.id), "owner_id": document.owner_id},
        )
        return document

    async def mark_processing(
        self,
        document_id: UUID,
        started_at: datetime,
        is_retry: bool = False,
    ) -> DocumentModel:
        """
        Mark document as PROCESSING.

        Args:
            document_id: Document UUID
            started_at: Attempt start time
            is_retry: Also stamp last_retry_at

        Raises:
            DocumentNotFoundError: Document not found
        """
        fields: dict[str, Any] = {
            "status": DocumentStatus.PROCESSING,
            "processing_started_at": started_at,
        }
        if is_retry:
            fields["last_retry_at"] = started_at
        document = await self._update("mark_processing", document_id, **fields)
        logger.info(
            f"{__name__}:mark_processing - Document marked as PROCESSING",
            extra={"document_id": str(document_id), "is_retry": is_retry},
        )
        return document

    async def record_file_metadata(
        self,
        document: DocumentModel,
        *,
        file_name: str,
        file_size: int,
        mime_type: str,
        file_extension: str,
        checksum: str,
    ) -> DocumentModel:
        """
        Store fetched file metadata and digests.

        original_checksum is only written when the record has none yet, so
        the first successful download stays the reference.
        """
        fields: dict[str, Any] = {
            "original_filename": file_name[:255],
            "file_size": file_size,
            "mime_type": mime_type,
            "file_extension": file_extension,
            "current_checksum": checksum,
        }
        if document.original_checksum is None:
            fields["original_checksum"] = checksum
        elif document.original_checksum != checksum:
            logger.warning(
                f"{__name__}:record_file_metadata - Source content changed since first download",
                extra={"document_id": str(document.id)},
            )
        return await self._update("record_file_metadata", document.id, **fields)

    async def record_storage_location(
        self,
        document_id: UUID,
        bucket: str,
        path: str,
    ) -> DocumentModel:
        return await self._update(
            "record_storage_location",
            document_id,
            storage_bucket=bucket,
            storage_path=path,
        )

    async def mark_completed(
        self,
        document_id: UUID,
        *,
        signed_url: str,
        signed_url_expires_at: datetime,
        completed_at: datetime,
        duration_ms: int,
    ) -> DocumentModel:
        """
        Mark document as COMPLETED and clear error and retry fields.

        Raises:
            DocumentNotFoundError: Document not found
        """
        document = await self._update(
            "mark_completed",
            document_id,
            status=DocumentStatus.COMPLETED,
            signed_url=signed_url,
            signed_url_expires_at=signed_url_expires_at,
            processing_completed_at=completed_at,
            processing_duration_ms=duration_ms,
            error_message=None,
            error_code=None,
            error_details=None,
            next_retry_at=None,
        )
        logger.info(
            f"{__name__}:mark_completed - Document marked as COMPLETED",
            extra={"document_id": str(document_id), "duration_ms": duration_ms},
        )
        return document

    async def mark_failed(
        self,
        document_id: UUID,
        *,
        error_code: ErrorCode,
        error_message: str,
        retry_count: int,
        next_retry_at: datetime | None,
        error_details: dict[str, Any] | None = None,
    ) -> DocumentModel:
        """
        Mark document as FAILED with error details and retry schedule.

        Args:
            document_id: Document UUID
            error_code: Failure category
            error_message: Human-readable error description (truncated to 2000 chars)
            retry_count: Failed attempts including this one
            next_retry_at: When the sweeper may pick it up again, None for never
            error_details: Diagnostic payload

        Raises:
            DocumentNotFoundError: Document not found
        """
        truncated_error = truncate_error(error_message)
        document = await self._update(
            "mark_failed",
            document_id,
            status=DocumentStatus.FAILED,
            error_code=error_code,
            error_message=truncated_error,
            error_details=error_details,
            retry_count=retry_count,
            next_retry_at=next_retry_at,
        )
        logger.info(
            f"{__name__}:mark_failed - Document marked as FAILED",
            extra={
                "document_id": str(document_id),
                "error_code": error_code.value,
                "retry_count": retry_count,
                "next_retry_at": next_retry_at.isoformat() if next_retry_at else None,
            },
        )
        return document

    async def mark_permanently_failed(
        self,
        document: DocumentModel,
        failed_at: datetime,
    ) -> DocumentModel:
        """
        Flip a record whose retry budget is spent to MAX_RETRIES_EXCEEDED.

        The previous error code and message are kept in error_details.
        """
        details = {
            "last_error_code": document.error_code.value if document.error_code else None,
            "last_error_message": document.error_message,
            "exhausted_at": failed_at.isoformat(),
        }
        updated = await self._update(
            "mark_permanently_failed",
            document.id,
            status=DocumentStatus.FAILED,
            error_code=ErrorCode.MAX_RETRIES_EXCEEDED,
            error_message=f"Permanently failed after {document.retry_count} retries",
            error_details=details,
            next_retry_at=None,
        )
        logger.warning(
            f"{__name__}:mark_permanently_failed - Retry budget exhausted",
            extra={"document_id": str(document.id), "retry_count": document.retry_count},
        )
        return updated
