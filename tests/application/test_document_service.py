"""
Test suite for DocumentService.

Runs against SQLite and the in-memory blob store.

System role: Verification of document read and maintenance operations
"""

import hashlib
import uuid
from datetime import timedelta

import pytest

from incident_docs.application.services.document_service import DocumentService
from incident_docs.boundary.db.base import utc_now
from incident_docs.boundary.db.CRUD.document_crud import document_crud
from incident_docs.boundary.db.models.document_model import DocumentStatus, ErrorCode
from incident_docs.core.exceptions import DocumentNotFoundError, StorageError, ValidationError

PHOTO = b"\xff\xd8stored-photo"
STORED_PATH = "owner-1/selfie/1700000000000_selfie.jpg"


@pytest.fixture
def service(test_async_db, blob_store, storage_settings) -> DocumentService:
    return DocumentService(test_async_db, blob_store, storage_settings)


@pytest.fixture
async def completed_document(test_async_db, blob_store):
    await blob_store.put(PHOTO, STORED_PATH, "image/jpeg", bucket="user-documents")
    checksum = hashlib.sha256(PHOTO).hexdigest()
    document = await document_crud.create(
        test_async_db,
        owner_id="owner-1",
        document_kind="selfie",
        source_url="https://files.forms.test/selfie.jpg",
        status=DocumentStatus.COMPLETED,
        storage_bucket="user-documents",
        storage_path=STORED_PATH,
        original_checksum=checksum,
        current_checksum=checksum,
        signed_url="https://storage.test/old",
    )
    await test_async_db.commit()
    return document


class TestListAndGet:
    @pytest.mark.asyncio
    async def test_lists_page_with_total(self, service: DocumentService, test_async_db) -> None:
        # Arrange
        for kind in ("selfie", "licence", "registration"):
            await document_crud.create(test_async_db, owner_id="owner-1", document_kind=kind)
        await test_async_db.commit()

        # Act
        documents, total = await service.list_owner_documents("owner-1", limit=2)

        # Assert
        assert len(documents) == 2
        assert total == 3

    @pytest.mark.asyncio
    async def test_unknown_document_raises(self, service: DocumentService) -> None:
        with pytest.raises(DocumentNotFoundError):
            await service.get_document(uuid.uuid4())


class TestRefreshSignedUrl:
    @pytest.mark.asyncio
    async def test_reissue_keeps_long_lived_lifetime(
        self,
        service: DocumentService,
        completed_document,
        storage_settings,
    ) -> None:
        # Act
        response = await service.refresh_signed_url(completed_document.id)

        # Assert
        assert response.stored is True
        assert response.signed_url.endswith(f"expires={storage_settings.signed_url_ttl_seconds}")
        assert response.expires_at - utc_now() > timedelta(days=300)
        stored = await service.get_document(completed_document.id)
        assert stored.signed_url == response.signed_url
        assert stored.signed_url_expires_at - utc_now() > timedelta(days=300)

    @pytest.mark.asyncio
    async def test_custom_ttl_is_not_stored(self, service: DocumentService, completed_document) -> None:
        # Act
        response = await service.refresh_signed_url(completed_document.id, ttl_seconds=60)

        # Assert
        assert response.signed_url.endswith("expires=60")
        assert response.stored is False
        stored = await service.get_document(completed_document.id)
        assert stored.signed_url == "https://storage.test/old"

    @pytest.mark.asyncio
    async def test_failed_document_cannot_be_signed(self, service: DocumentService, test_async_db) -> None:
        # Arrange
        document = await document_crud.create(
            test_async_db,
            owner_id="owner-1",
            document_kind="selfie",
            status=DocumentStatus.FAILED,
            error_code=ErrorCode.NOT_FOUND,
        )

        # Act / Assert
        with pytest.raises(ValidationError):
            await service.refresh_signed_url(document.id)

    @pytest.mark.asyncio
    async def test_signing_error_propagates(self, service: DocumentService, completed_document, blob_store) -> None:
        blob_store.fail_sign = True

        with pytest.raises(StorageError):
            await service.refresh_signed_url(completed_document.id)


class TestVerifyIntegrity:
    @pytest.mark.asyncio
    async def test_unchanged_object_matches(self, service: DocumentService, completed_document) -> None:
        # Act
        report = await service.verify_integrity(completed_document.id)

        # Assert
        assert report.matches is True
        assert report.current_checksum == completed_document.original_checksum

    @pytest.mark.asyncio
    async def test_tampered_object_is_reported(
        self,
        service: DocumentService,
        completed_document,
        blob_store,
    ) -> None:
        # Arrange
        await blob_store.put(b"tampered", STORED_PATH, "image/jpeg", bucket="user-documents")

        # Act
        report = await service.verify_integrity(completed_document.id)

        # Assert
        assert report.matches is False
        stored = await service.get_document(completed_document.id)
        assert stored.current_checksum == hashlib.sha256(b"tampered").hexdigest()
        assert stored.original_checksum == hashlib.sha256(PHOTO).hexdigest()
        assert stored.checksum_verified_at is not None


class TestSoftDelete:
    @pytest.mark.asyncio
    async def test_deleted_document_disappears(
        self,
        service: DocumentService,
        completed_document,
        blob_store,
    ) -> None:
        # Act
        await service.soft_delete(completed_document.id)

        # Assert
        with pytest.raises(DocumentNotFoundError):
            await service.get_document(completed_document.id)
        documents, total = await service.list_owner_documents("owner-1")
        assert documents == [] and total == 0
        assert blob_store.paths() == [STORED_PATH]

    @pytest.mark.asyncio
    async def test_deleting_twice_raises(self, service: DocumentService, completed_document) -> None:
        await service.soft_delete(completed_document.id)

        with pytest.raises(DocumentNotFoundError):
            await service.soft_delete(completed_document.id)

