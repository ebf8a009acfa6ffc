"""
Two-phase staging of session uploads.

Files uploaded during a form session (map screenshots, multi-photo pages)
land under temp/{session_id}/ before the owning user or incident exists.
When the submission is finalized each upload is claimed, moved to
permanent/{owner}/{associated_id}/{category}/, signed and recorded as a
completed document. A failed finalization releases its claim so it can be
retried.

Dependencies: sqlalchemy, incident_docs.boundary, incident_docs.core.document_processing
System role: Session-scoped upload sub-workflow beside the ingestion orchestrator
"""

import logging
from datetime import datetime, timedelta
from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import async_sessionmaker

from incident_docs.boundary.aws.storage_paths import (
    permanent_object_key,
    resolve_extension,
    staging_object_key,
)
from incident_docs.boundary.db.base import utc_now
from incident_docs.boundary.db.CRUD.temp_upload_crud import temp_upload_crud
from incident_docs.boundary.db.models.document_model import DocumentCategory, DocumentStatus
from incident_docs.boundary.db.models.temp_upload_model import TempUploadModel
from incident_docs.configs.ingestion import IngestionSettings
from incident_docs.configs.storage import StorageSettings
from incident_docs.core.document_processing.checksum import CHECKSUM_ALGORITHM, compute_checksum
from incident_docs.core.document_processing.models import (
    FinalizeResult,
    FinalizeStatus,
    StagedDocumentResult,
    StagedUpload,
)
from incident_docs.core.exceptions import StagingError, StorageError, ValidationError
from incident_docs.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)


class StagingWorkflow:
    """Stage, list, discard, finalize and expire session uploads."""

    def __init__(
        self,
        session_factory: async_sessionmaker,
        record_store,
        blob_store,
        storage_settings: StorageSettings,
        ingestion_settings: IngestionSettings,
    ) -> None:
        self._session_factory = session_factory
        self._store = record_store
        self._blob_store = blob_store
        self._storage_settings = storage_settings
        self._ingestion_settings = ingestion_settings

    @property
    def bucket(self) -> str:
        return self._storage_settings.user_documents_bucket

    async def stage_upload(
        self,
        session_id: str,
        field_name: str,
        data: bytes,
        content_type: str,
        file_name: str | None = None,
    ) -> StagedUpload:
        """
        Store an upload under temp/ and record it as claimable for 24 hours.

        Args:
            session_id: Form session id
            field_name: Form field the file belongs to
            data: File bytes
            content_type: MIME type reported by the client
            file_name: Client-side file name

        Returns:
            StagedUpload: The staged upload

        Raises:
            ValidationError: Empty or oversized file
            StorageError: Upload to object storage failed
        """
        if not data:
            raise ValidationError("Uploaded file is empty", field=field_name)
        if len(data) > self._ingestion_settings.max_file_bytes:
            raise ValidationError(
                f"File exceeds maximum size of {self._ingestion_settings.max_file_bytes} bytes",
                field=field_name,
            )

        extension = resolve_extension(file_name, content_type)
        key = staging_object_key(session_id, field_name, extension)
        await self._blob_store.put(data, key, content_type, bucket=self.bucket)

        now = utc_now()
        try:
            async with self._session_factory() as session:
                upload = await temp_upload_crud.create(
                    session,
                    session_id=session_id,
                    field_name=field_name,
                    original_filename=(file_name or "")[:255] or None,
                    storage_bucket=self.bucket,
                    storage_path=key,
                    file_size=len(data),
                    mime_type=content_type,
                    checksum=compute_checksum(data),
                    expires_at=now + timedelta(hours=self._storage_settings.staging_ttl_hours),
                    claimed=False,
                )
                await session.commit()
        except Exception:
            logger.error(
                f"{__name__}:stage_upload - Could not record staged upload, removing object",
                extra={"session_id": session_id, "path": key},
            )
            await self._delete_quietly(key)
            raise

        logger.info(
            f"{__name__}:stage_upload - Upload staged",
            extra={"session_id": session_id, "field_name": field_name, "upload_id": str(upload.id)},
        )
        return StagedUpload.model_validate(upload)

    async def list_staged(self, session_id: str) -> list[StagedUpload]:
        async with self._session_factory() as session:
            uploads = await temp_upload_crud.get_unclaimed_by_session(session, session_id, utc_now())
        return [StagedUpload.model_validate(u) for u in uploads]

    async def discard(self, upload_id: UUID) -> None:
        """
        Remove an unclaimed upload and its object.

        Raises:
            StagingError: Unknown or already claimed upload
        """
        async with self._session_factory() as session:
            upload = await temp_upload_crud.get_by_id(session, upload_id)
            if upload is None:
                raise StagingError("Staged upload not found", upload_id=str(upload_id))
            if upload.claimed:
                raise StagingError("Staged upload already claimed", upload_id=str(upload_id))

            await self._blob_store.delete(upload.storage_path, bucket=upload.storage_bucket)
            await temp_upload_crud.delete_by_id(session, upload_id)
            await session.commit()

        logger.info(f"{__name__}:discard - Upload discarded", extra={"upload_id": str(upload_id)})

    async def finalize(
        self,
        session_id: str,
        owner_id: str,
        associated_id: str,
        category: DocumentCategory = DocumentCategory.INCIDENT_REPORT,
        associated_with: str | None = None,
    ) -> FinalizeResult:
        """
        Claim every pending upload of a session and turn it into a document.

        Args:
            session_id: Form session whose uploads are finalized
            owner_id: Owner of the resulting documents
            associated_id: Incident or form id the documents attach to
            category: Document category for the records and key path
            associated_with: Type of the attached entity

        Returns:
            FinalizeResult: One entry per staged upload
        """
        async with self._session_factory() as session:
            uploads = await temp_upload_crud.get_unclaimed_by_session(session, session_id, utc_now())

        result = FinalizeResult(session_id=session_id)
        for upload in uploads:
            result.results.append(
                await self._finalize_one(upload, owner_id, associated_id, category, associated_with)
            )

        logger.info(
            f"{__name__}:finalize - Session finalized",
            extra={
                "session_id": session_id,
                "owner_id": owner_id,
                "completed": result.completed,
                "failed": result.failed,
            },
        )
        return result

    async def expire_stale(self, now: datetime | None = None, limit: int | None = None) -> int:
        """
        Delete expired unclaimed uploads and their objects.

        An upload whose object cannot be deleted is kept for the next run.

        Returns:
            int: Number of uploads removed
        """
        now = now or utc_now()
        async with self._session_factory() as session:
            expired: Sequence[TempUploadModel] = await temp_upload_crud.get_expired_unclaimed(
                session, now, limit=limit
            )

        removed = 0
        for upload in expired:
            try:
                await self._blob_store.delete(upload.storage_path, bucket=upload.storage_bucket)
            except StorageError as e:
                logger.warning(
                    f"{__name__}:expire_stale - Could not delete object, keeping row",
                    extra={"upload_id": str(upload.id), "error": e.message},
                )
                continue
            async with self._session_factory() as session:
                await temp_upload_crud.delete_by_id(session, upload.id)
                await session.commit()
            removed += 1

        logger.info(f"{__name__}:expire_stale - Removed {removed} expired uploads")
        return removed

    async def _finalize_one(
        self,
        upload: TempUploadModel,
        owner_id: str,
        associated_id: str,
        category: DocumentCategory,
        associated_with: str | None,
    ) -> StagedDocumentResult:
        now = utc_now()
        async with self._session_factory() as session:
            claimed = await temp_upload_crud.claim(session, upload.id, owner_id, now)
            await session.commit()

        if claimed is None:
            return StagedDocumentResult(
                upload_id=upload.id,
                field_name=upload.field_name,
                status=FinalizeStatus.SKIPPED,
                error="Already claimed",
            )

        try:
            final_key = claimed.storage_path
            if not final_key.startswith("permanent/"):
                final_key = permanent_object_key(owner_id, associated_id, category.value, claimed.storage_path)
                await self._blob_store.move(claimed.storage_path, final_key, bucket=claimed.storage_bucket)
                async with self._session_factory() as session:
                    await temp_upload_crud.update_by_id(session, claimed.id, storage_path=final_key)
                    await session.commit()

            signed_url, expires_at = await self._blob_store.sign(
                final_key,
                self._storage_settings.signed_url_ttl_seconds,
                bucket=claimed.storage_bucket,
            )
            document = await self._store.insert(
                owner_id=owner_id,
                document_kind=claimed.field_name,
                document_category=category,
                source_type="temp_upload",
                source_field=claimed.field_name,
                associated_with=associated_with,
                associated_id=associated_id,
                original_filename=claimed.original_filename,
                storage_bucket=claimed.storage_bucket,
                storage_path=final_key,
                file_size=claimed.file_size,
                mime_type=claimed.mime_type,
                file_extension=resolve_extension(final_key, claimed.mime_type),
                original_checksum=claimed.checksum,
                current_checksum=claimed.checksum,
                checksum_algorithm=CHECKSUM_ALGORITHM,
                status=DocumentStatus.COMPLETED,
                retry_count=0,
                max_retries=self._ingestion_settings.max_retries,
                signed_url=signed_url,
                signed_url_expires_at=expires_at,
                processing_started_at=now,
                processing_completed_at=utc_now(),
            )
        except Exception as e:
            log_exception_with_context(
                logger,
                f"{__name__}:_finalize_one - Finalization failed, releasing claim",
                e,
                upload_id=upload.id,
                owner_id=owner_id,
            )
            async with self._session_factory() as session:
                await temp_upload_crud.release(session, upload.id)
                await session.commit()
            return StagedDocumentResult(
                upload_id=upload.id,
                field_name=upload.field_name,
                status=FinalizeStatus.FAILED,
                error=f"{type(e).__name__}: {e}",
            )

        return StagedDocumentResult(
            upload_id=upload.id,
            field_name=upload.field_name,
            status=FinalizeStatus.COMPLETED,
            document_id=document.id,
            storage_path=final_key,
            signed_url=signed_url,
        )

    async def _delete_quietly(self, key: str) -> None:
        try:
            await self._blob_store.delete(key, bucket=self.bucket)
        except StorageError as e:
            logger.warning(
                f"{__name__}:_delete_quietly - Orphaned staged object",
                extra={"path": key, "error": e.message},
            )
