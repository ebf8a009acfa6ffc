"""
Document service.

Read and maintenance operations over stored documents: owner listings,
signed URL refresh, integrity verification and soft deletion. Ingestion
itself lives in the core pipeline.

Dependencies: incident_docs.boundary.db, incident_docs.boundary.aws, incident_docs.core
System role: Document management orchestration for the HTTP API
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from incident_docs.boundary.db.base import utc_now
from incident_docs.boundary.db.CRUD.document_crud import document_crud
from incident_docs.boundary.db.models.document_model import (
    DocumentCategory,
    DocumentModel,
    DocumentStatus,
)
from incident_docs.configs.storage import StorageSettings
from incident_docs.core.document_processing.checksum import compute_checksum
from incident_docs.core.exceptions import DocumentNotFoundError, ValidationError
from incident_docs.models.document import IntegrityReport, SignedUrlResponse

logger = logging.getLogger(__name__)


class DocumentService:
    """
    Document read/maintenance service bound to one request session.

    Handles document lifecycle after ingestion: listing, URL refresh,
    checksum verification, soft deletion.
    """

    def __init__(
        self,
        db: AsyncSession,
        blob_store,
        storage_settings: StorageSettings,
    ) -> None:
        """
        Initialize document service.

        Args:
            db: AsyncSession for document metadata
            blob_store: S3BlobStore for signing and reading stored objects
            storage_settings: Long-lived signed URL lifetime
        """
        self.db = db
        self._blob_store = blob_store
        self._storage_settings = storage_settings

    async def list_owner_documents(
        self,
        owner_id: str,
        status: DocumentStatus | None = None,
        document_kind: str | None = None,
        document_category: DocumentCategory | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> tuple[list[DocumentModel], int]:
        """
        List an owner's non-deleted documents, newest first.

        Args:
            owner_id: Owner to list for
            status: Optional status filter
            document_kind: Optional kind filter
            document_category: Optional category filter
            limit: Page size
            offset: Page offset

        Returns:
            tuple: (page of documents, total matching documents)
        """
        filters = {
            "status": status,
            "document_kind": document_kind,
            "document_category": document_category,
        }
        documents = await document_crud.get_by_owner(
            self.db, owner_id, limit=limit, offset=offset, **filters
        )
        total = await document_crud.count_by_owner(self.db, owner_id, **filters)
        return list(documents), total

    async def get_document(self, document_id: UUID) -> DocumentModel:
        """
        Raises:
            DocumentNotFoundError: Unknown or soft-deleted id
        """
        document = await document_crud.get_by_id(self.db, document_id)
        if document is None:
            raise DocumentNotFoundError(str(document_id))
        return document

    async def refresh_signed_url(
        self,
        document_id: UUID,
        ttl_seconds: int | None = None,
    ) -> SignedUrlResponse:
        """
        Issue a new signed URL for a completed document.

        Without `ttl_seconds` the URL gets the long-lived ingestion lifetime
        and replaces the one stored on the record. A caller-chosen lifetime
        yields a one-off URL that is returned but not stored, so the record
        always keeps its long-lived link.

        Raises:
            DocumentNotFoundError: Unknown or soft-deleted id
            ValidationError: Document has no stored object yet
            StorageError: Signing failed
        """
        document = await self.get_document(document_id)
        if document.status != DocumentStatus.COMPLETED or not document.storage_path:
            raise ValidationError(
                "Document is not stored yet",
                field="status",
                details={"document_id": str(document_id), "status": document.status.value},
            )

        persist = ttl_seconds is None
        ttl = self._storage_settings.signed_url_ttl_seconds if persist else ttl_seconds
        url, expires_at = await self._blob_store.sign(
            document.storage_path,
            ttl,
            bucket=document.storage_bucket,
        )
        if persist:
            await document_crud.update_by_id(
                self.db,
                document_id,
                signed_url=url,
                signed_url_expires_at=expires_at,
            )
            await self.db.commit()

        logger.info(
            f"{__name__}:refresh_signed_url - Signed URL reissued",
            extra={"document_id": str(document_id), "ttl_seconds": ttl},
        )
        return SignedUrlResponse(
            document_id=document_id,
            signed_url=url,
            expires_at=expires_at,
            stored=persist,
        )

    async def verify_integrity(self, document_id: UUID) -> IntegrityReport:
        """
        Re-hash the stored object and record the result as current_checksum.

        Raises:
            DocumentNotFoundError: Unknown or soft-deleted id
            ValidationError: Document has no stored object or digest yet
            StorageError: Object could not be read
        """
        document = await self.get_document(document_id)
        if not document.storage_path or not document.original_checksum:
            raise ValidationError(
                "Document has no stored object to verify",
                details={"document_id": str(document_id)},
            )

        data = await self._blob_store.get(document.storage_path, bucket=document.storage_bucket)
        checksum = compute_checksum(data)
        verified_at = utc_now()
        await document_crud.update_by_id(
            self.db,
            document_id,
            current_checksum=checksum,
            checksum_verified_at=verified_at,
        )
        await self.db.commit()

        matches = checksum == document.original_checksum
        if not matches:
            logger.warning(
                f"{__name__}:verify_integrity - Stored object differs from original",
                extra={"document_id": str(document_id)},
            )
        return IntegrityReport(
            document_id=document_id,
            original_checksum=document.original_checksum,
            current_checksum=checksum,
            matches=matches,
            verified_at=verified_at,
        )

    async def soft_delete(self, document_id: UUID) -> None:
        """
        Hide a document from all normal reads. The stored object is kept.

        Raises:
            DocumentNotFoundError: Unknown or already deleted id
        """
        document = await document_crud.soft_delete(self.db, document_id, utc_now())
        if document is None:
            raise DocumentNotFoundError(str(document_id))
        await self.db.commit()
        logger.info(
            f"{__name__}:soft_delete - Document soft-deleted",
            extra={"document_id": str(document_id)},
        )

