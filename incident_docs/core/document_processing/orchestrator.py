"""
Ingestion orchestrator.

Drives one remote document through create → begin → fetch → checksum →
upload → sign → complete, persisting the record after every step. Failures
are classified, written to the record with a retry schedule, and returned as
a failed result; nothing is raised past this class.

Dependencies: incident_docs.boundary (fetcher, blob store), incident_docs.core.document_processing
System role: Core state machine of the document ingestion pipeline
"""

import asyncio
import logging
import time
from typing import Any
from urllib.parse import urlsplit

from incident_docs.boundary.aws.storage_paths import document_object_key, resolve_extension
from incident_docs.boundary.db.base import utc_now
from incident_docs.boundary.db.models.document_model import (
    DocumentCategory,
    DocumentModel,
    DocumentStatus,
    ErrorCode,
)
from incident_docs.configs.ingestion import IngestionSettings
from incident_docs.configs.storage import StorageSettings
from incident_docs.core.document_processing.backoff import schedule_next_retry
from incident_docs.core.document_processing.checksum import CHECKSUM_ALGORITHM, compute_checksum
from incident_docs.core.document_processing.database.document_status_updater import (
    DocumentStatusUpdater,
    truncate_error,
)
from incident_docs.core.document_processing.models import (
    BatchIngestionRequest,
    BatchIngestionResult,
    IngestionRequest,
    IngestionResult,
)
from incident_docs.core.exceptions import FetchError, StorageError
from incident_docs.observability.log_utils import (
    log_exception_with_context,
    log_with_context,
    redact_url,
)

logger = logging.getLogger(__name__)


def is_valid_source_url(url: str | None) -> bool:
    """Absolute http(s) URL with a host and no whitespace."""
    if not url or any(ch.isspace() for ch in url):
        return False
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    return parts.scheme in ("http", "https") and bool(parts.hostname)


class IngestionOrchestrator:
    """
    Fetch, checksum, store and sign remote documents.

    Usage:
        orchestrator = IngestionOrchestrator(store, fetcher, blob_store, settings, storage_settings)
        result = await orchestrator.create_ingestion(IngestionRequest(...))
    """

    def __init__(
        self,
        record_store,
        fetcher,
        blob_store,
        settings: IngestionSettings,
        storage_settings: StorageSettings,
    ) -> None:
        """
        Initialize the orchestrator with its collaborators.

        Args:
            record_store: DocumentRecordStore (or any object with the same methods)
            fetcher: RemoteFetcher
            blob_store: S3BlobStore
            settings: Retry budget, backoff base and fetch limits
            storage_settings: Buckets and signed URL lifetime
        """
        self.updater = DocumentStatusUpdater(record_store)
        self._fetcher = fetcher
        self._blob_store = blob_store
        self._settings = settings
        self._storage_settings = storage_settings

    def bucket_for(self, category: DocumentCategory) -> str:
        if category == DocumentCategory.INCIDENT_REPORT:
            return self._storage_settings.incident_bucket
        return self._storage_settings.user_documents_bucket

    async def create_ingestion(self, request: IngestionRequest) -> IngestionResult:
        """
        Create a document record and run the first attempt synchronously.

        Args:
            request: Owner, kind, category and source of the document

        Returns:
            IngestionResult: completed, or failed with error fields and retry schedule
        """
        if not is_valid_source_url(request.source_url):
            log_with_context(
                logger,
                logging.WARNING,
                f"{__name__}:create_ingestion - Rejected malformed source URL",
                owner_id=request.owner_id,
                document_kind=request.document_kind,
                source_url=redact_url(request.source_url),
            )
            return self._rejected(request, ErrorCode.INVALID_URL, "Invalid source URL")

        try:
            record = await self.updater.create_pending(
                owner_id=request.owner_id,
                document_kind=request.document_kind,
                document_category=request.document_category,
                source_type=request.source_type,
                source_url=request.source_url,
                source_field=request.source_field,
                associated_with=request.associated_with,
                associated_id=request.associated_id,
                max_retries=self._settings.max_retries,
                checksum_algorithm=CHECKSUM_ALGORITHM,
            )
        except Exception as e:
            log_exception_with_context(
                logger,
                f"{__name__}:create_ingestion - Could not create document record",
                e,
                owner_id=request.owner_id,
                document_kind=request.document_kind,
            )
            return self._rejected(
                request,
                ErrorCode.PROCESSING_ERROR,
                f"Could not create document record: {type(e).__name__}",
            )

        return await self.process_record(record)

    async def ingest_batch(self, batch: BatchIngestionRequest) -> BatchIngestionResult:
        """
        Ingest every document of one submission concurrently.

        Partial failure is reported per document; the call itself does not raise.
        """
        started = time.perf_counter()
        requests = batch.to_requests()
        outcomes = await asyncio.gather(
            *(self.create_ingestion(request) for request in requests),
            return_exceptions=True,
        )

        results: list[IngestionResult] = []
        for request, outcome in zip(requests, outcomes):
            if isinstance(outcome, BaseException):
                log_exception_with_context(
                    logger,
                    f"{__name__}:ingest_batch - Ingestion raised",
                    outcome,
                    owner_id=request.owner_id,
                    document_kind=request.document_kind,
                )
                outcome = self._rejected(request, ErrorCode.PROCESSING_ERROR, str(outcome))
            results.append(outcome)

        batch_result = BatchIngestionResult(
            results=results,
            completed=sum(1 for r in results if r.status == DocumentStatus.COMPLETED),
            failed=sum(1 for r in results if r.status == DocumentStatus.FAILED),
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )

        level = logging.WARNING if batch_result.failed else logging.INFO
        log_with_context(
            logger,
            level,
            f"{__name__}:ingest_batch - {batch_result.completed}/{len(results)} documents stored",
            owner_id=batch.owner_id,
            failed_fields=",".join(batch_result.failed_fields) or None,
            duration_ms=batch_result.duration_ms,
        )
        return batch_result

    async def process_record(
        self,
        record: DocumentModel,
        *,
        is_retry: bool = False,
    ) -> IngestionResult:
        """
        Run begin → fetch → checksum → upload → sign → complete for an existing record.

        Shared with the retry sweeper; every run starts from the stored
        source_url and overwrites any partial progress of earlier attempts.

        Args:
            record: Record to drive (pending, or failed on retry)
            is_retry: Stamp last_retry_at when the attempt begins

        Returns:
            IngestionResult: Outcome after the attempt has been persisted
        """
        attempt_started = utc_now()
        timer = time.perf_counter()
        step = "begin"

        try:
            record = await self.updater.mark_processing(record.id, attempt_started, is_retry=is_retry)

            step = "fetch"
            fetched = await self._fetcher.fetch(record.source_url)

            step = "checksum"
            checksum = compute_checksum(fetched.content)
            extension = resolve_extension(fetched.file_name, fetched.content_type)
            record = await self.updater.record_file_metadata(
                record,
                file_name=fetched.file_name,
                file_size=fetched.size,
                mime_type=fetched.content_type,
                file_extension=extension,
                checksum=checksum,
            )

            step = "upload"
            bucket = self.bucket_for(record.document_category)
            # A retry overwrites the object an earlier attempt uploaded.
            if record.storage_path and record.storage_bucket == bucket:
                object_key = record.storage_path
            else:
                object_key = document_object_key(record.owner_id, record.document_kind, extension)
            await self._blob_store.put(fetched.content, object_key, fetched.content_type, bucket=bucket)
            record = await self.updater.record_storage_location(record.id, bucket, object_key)

            step = "sign"
            signed_url, expires_at = await self._blob_store.sign(
                object_key,
                self._storage_settings.signed_url_ttl_seconds,
                bucket=bucket,
            )

            step = "complete"
            record = await self.updater.mark_completed(
                record.id,
                signed_url=signed_url,
                signed_url_expires_at=expires_at,
                completed_at=utc_now(),
                duration_ms=int((time.perf_counter() - timer) * 1000),
            )
        except FetchError as e:
            return await self._fail(record, e.error_code, e.message, step, e.details)
        except StorageError as e:
            code = ErrorCode.SIGNED_URL_ERROR if step == "sign" else ErrorCode.STORAGE_UPLOAD_ERROR
            return await self._fail(record, code, e.message, step, e.details)
        except Exception as e:
            log_exception_with_context(
                logger,
                f"{__name__}:process_record - Unexpected failure",
                e,
                document_id=record.id,
                step=step,
            )
            return await self._fail(record, ErrorCode.PROCESSING_ERROR, f"{type(e).__name__}: {e}", step)

        return IngestionResult.from_record(record)

    async def _fail(
        self,
        record: DocumentModel,
        error_code: ErrorCode,
        message: str,
        step: str,
        details: dict[str, Any] | None = None,
    ) -> IngestionResult:
        now = utc_now()
        retry_count = min(record.retry_count + 1, record.max_retries)
        next_retry_at = schedule_next_retry(
            error_code,
            retry_count,
            record.max_retries,
            self._settings.base_retry_delay_seconds,
            now,
        )
        error_details = {
            **(details or {}),
            "step": step,
            "retry_attempt": retry_count,
            "failed_at": now.isoformat(),
        }

        try:
            record = await self.updater.mark_failed(
                record.id,
                error_code=error_code,
                error_message=message,
                retry_count=retry_count,
                next_retry_at=next_retry_at,
                error_details=error_details,
            )
        except Exception as e:
            log_exception_with_context(
                logger,
                f"{__name__}:_fail - Could not persist failure",
                e,
                document_id=record.id,
                error_code=error_code.value,
            )
            return IngestionResult(
                document_id=record.id,
                status=DocumentStatus.FAILED,
                document_kind=record.document_kind,
                source_field=record.source_field,
                error_code=error_code,
                error_message=truncate_error(message),
                retry_count=retry_count,
                next_retry_at=next_retry_at,
                permanently_failed=next_retry_at is None,
            )

        log_with_context(
            logger,
            logging.WARNING,
            f"{__name__}:_fail - {step} failed with {error_code.value}",
            document_id=record.id,
            owner_id=record.owner_id,
            retry_count=retry_count,
            next_retry_at=next_retry_at.isoformat() if next_retry_at else None,
        )
        return IngestionResult.from_record(record)

    @staticmethod
    def _rejected(request: IngestionRequest, error_code: ErrorCode, message: str) -> IngestionResult:
        return IngestionResult(
            document_id=None,
            status=DocumentStatus.FAILED,
            document_kind=request.document_kind,
            source_field=request.source_field,
            error_code=error_code,
            error_message=message,
            permanently_failed=True,
        )
