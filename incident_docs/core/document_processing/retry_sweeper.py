"""
Retry sweeper.

Periodically invoked batch job: selects failed documents that are under
their retry budget and past their backoff deadline, and re-drives each one
through the orchestrator's fetch/upload steps. Records whose budget runs out
are flipped to MAX_RETRIES_EXCEEDED.

Dependencies: incident_docs.core.document_processing.orchestrator
System role: Background recovery of transiently failed ingestions
"""

import asyncio
import logging
import time
from datetime import datetime
from uuid import UUID

from incident_docs.boundary.db.base import utc_now
from incident_docs.boundary.db.models.document_model import DocumentModel, DocumentStatus, ErrorCode
from incident_docs.configs.ingestion import IngestionSettings
from incident_docs.core.document_processing.models import (
    RetryCandidate,
    RetryOutcome,
    RetryStatistics,
    RetryStatus,
    SweepSummary,
)
from incident_docs.core.document_processing.orchestrator import IngestionOrchestrator
from incident_docs.core.exceptions import DocumentNotFoundError
from incident_docs.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)


class RetrySweeper:
    """
    Re-drive failed documents with exponential backoff.

    Not a long-lived loop: each sweep() call is one pass, triggered by cron
    or on demand.
    """

    def __init__(
        self,
        record_store,
        orchestrator: IngestionOrchestrator,
        settings: IngestionSettings,
    ) -> None:
        """
        Args:
            record_store: DocumentRecordStore used for selection and re-reads
            orchestrator: Supplies the shared attempt logic and status updater
            settings: Default batch limit and pacing delay
        """
        self._store = record_store
        self._orchestrator = orchestrator
        self._settings = settings

    @property
    def updater(self):
        return self._orchestrator.updater

    async def sweep(self, limit: int | None = None, now: datetime | None = None) -> SweepSummary:
        """
        Run one retry pass.

        Args:
            limit: Maximum records to pick (defaults to settings.sweep_batch_limit)
            now: Reference time for the backoff deadline (defaults to current UTC)

        Returns:
            SweepSummary: processed, succeeded, failed, permanently_failed, skipped
        """
        started = time.perf_counter()
        if limit is None:
            limit = self._settings.sweep_batch_limit
        now = now or utc_now()

        candidates = await self._store.select_retry_candidates(now, limit)
        summary = SweepSummary()
        logger.info(
            f"{__name__}:sweep - Found {len(candidates)} documents to retry",
            extra={"limit": limit},
        )

        for index, candidate in enumerate(candidates):
            if index and self._settings.sweep_pacing_seconds:
                await asyncio.sleep(self._settings.sweep_pacing_seconds)
            try:
                outcome = await self._retry_candidate(candidate.id)
            except Exception as e:
                log_exception_with_context(
                    logger,
                    f"{__name__}:sweep - Retry raised",
                    e,
                    document_id=candidate.id,
                )
                outcome = RetryOutcome(
                    document_id=candidate.id,
                    status=RetryStatus.FAILED,
                    retry_count=candidate.retry_count,
                    error_code=ErrorCode.PROCESSING_ERROR,
                    error_message=f"{type(e).__name__}: {e}",
                )
            summary.record(outcome)

        summary.duration_ms = round((time.perf_counter() - started) * 1000, 2)
        logger.info(
            f"{__name__}:sweep - Sweep finished",
            extra={
                "processed": summary.processed,
                "succeeded": summary.succeeded,
                "failed": summary.failed,
                "permanently_failed": summary.permanently_failed,
                "skipped": summary.skipped,
                "duration_ms": summary.duration_ms,
            },
        )
        return summary

    async def preview(self, limit: int | None = None, now: datetime | None = None) -> list[RetryCandidate]:
        """Records the next sweep would pick, without touching them."""
        candidates = await self._store.select_retry_candidates(
            now or utc_now(),
            self._settings.sweep_batch_limit if limit is None else limit,
        )
        return [
            RetryCandidate(
                document_id=doc.id,
                owner_id=doc.owner_id,
                document_kind=doc.document_kind,
                retry_count=doc.retry_count,
                max_retries=doc.max_retries,
                error_code=doc.error_code,
                next_retry_at=doc.next_retry_at,
            )
            for doc in candidates
        ]

    async def retry_document_by_id(self, document_id: UUID) -> RetryOutcome:
        """
        Manually retry one document, ignoring its backoff deadline.

        Raises:
            DocumentNotFoundError: Unknown or soft-deleted id
        """
        document = await self._store.get(document_id)
        if document is None:
            raise DocumentNotFoundError(str(document_id))
        if document.status == DocumentStatus.COMPLETED:
            return self._outcome(document, RetryStatus.ALREADY_COMPLETED)
        return await self._retry(document)

    async def get_retry_statistics(self, now: datetime | None = None) -> RetryStatistics:
        stats = await self._store.get_retry_statistics(now or utc_now())
        return RetryStatistics(**stats)

    async def _retry_candidate(self, document_id: UUID) -> RetryOutcome:
        # Re-read: another sweep or a manual retry may have moved it since selection.
        document = await self._store.get(document_id)
        if document is None or document.status != DocumentStatus.FAILED:
            logger.info(
                f"{__name__}:_retry_candidate - Skipping document no longer failed",
                extra={"document_id": str(document_id)},
            )
            return RetryOutcome(
                document_id=document_id,
                status=RetryStatus.SKIPPED,
                retry_count=document.retry_count if document else 0,
            )
        return await self._retry(document)

    async def _retry(self, document: DocumentModel) -> RetryOutcome:
        # Already flipped; keep the last real error in error_details.
        if document.error_code == ErrorCode.MAX_RETRIES_EXCEEDED:
            return self._outcome(document, RetryStatus.PERMANENTLY_FAILED)
        if document.retry_count >= document.max_retries:
            document = await self.updater.mark_permanently_failed(document, utc_now())
            return self._outcome(document, RetryStatus.PERMANENTLY_FAILED)

        logger.info(
            f"{__name__}:_retry - Retrying document",
            extra={
                "document_id": str(document.id),
                "attempt": document.retry_count + 1,
                "max_retries": document.max_retries,
            },
        )
        result = await self._orchestrator.process_record(document, is_retry=True)

        if result.status == DocumentStatus.COMPLETED:
            return RetryOutcome(
                document_id=document.id,
                status=RetryStatus.COMPLETED,
                retry_count=result.retry_count,
            )

        if result.retry_count >= document.max_retries:
            refreshed = await self._store.get(document.id)
            if refreshed is not None and refreshed.status == DocumentStatus.FAILED:
                refreshed = await self.updater.mark_permanently_failed(refreshed, utc_now())
                return self._outcome(refreshed, RetryStatus.PERMANENTLY_FAILED)

        return RetryOutcome(
            document_id=document.id,
            status=RetryStatus.FAILED,
            retry_count=result.retry_count,
            error_code=result.error_code,
            error_message=result.error_message,
        )

    @staticmethod
    def _outcome(document: DocumentModel, status: RetryStatus) -> RetryOutcome:
        return RetryOutcome(
            document_id=document.id,
            status=status,
            retry_count=document.retry_count,
            error_code=document.error_code,
            error_message=document.error_message,
        )
