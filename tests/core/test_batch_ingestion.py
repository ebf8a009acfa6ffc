"""
Test suite for IngestionOrchestrator.ingest_batch.

Documents of one submission run concurrently, so these tests use the
in-memory record store instead of the shared-connection SQLite engine.

System role: Verification of multi-document submissions and partial failure
"""

import asyncio

import httpx
import pytest

from incident_docs.boundary.db.models.document_model import DocumentStatus, ErrorCode
from incident_docs.boundary.http.remote_fetcher import RemoteFetcher
from incident_docs.core.document_processing import IngestionOrchestrator
from incident_docs.core.document_processing.models import BatchDocument, BatchIngestionRequest

FIELDS = [
    "driving_license_picture",
    "selfie",
    "vehicle_registration",
    "insurance_certificate",
    "proof_of_address",
]


class ConcurrencyTracker:
    """MockTransport handler that records how many requests overlap."""

    def __init__(self) -> None:
        self.in_flight = 0
        self.peak = 0

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        await asyncio.sleep(0.01)
        self.in_flight -= 1
        if "missing" in request.url.path:
            return httpx.Response(404)
        return httpx.Response(200, content=request.url.path.encode(), headers={"content-type": "image/jpeg"})


@pytest.fixture
def tracker() -> ConcurrencyTracker:
    return ConcurrencyTracker()


@pytest.fixture
def batch_orchestrator(memory_record_store, blob_store, ingestion_settings, storage_settings, tracker):
    fetcher = RemoteFetcher(ingestion_settings, transport=httpx.MockTransport(tracker))
    return IngestionOrchestrator(memory_record_store, fetcher, blob_store, ingestion_settings, storage_settings)


def make_batch(owner_id: str, urls: dict[str, str]) -> BatchIngestionRequest:
    return BatchIngestionRequest(
        owner_id=owner_id,
        documents=[
            BatchDocument(document_kind=field, source_url=url, source_field=field)
            for field, url in urls.items()
        ],
    )


class TestIngestBatch:
    @pytest.mark.asyncio
    async def test_one_malformed_url_fails_alone(
        self,
        batch_orchestrator: IngestionOrchestrator,
        memory_record_store,
        blob_store,
        owner_id: str,
    ) -> None:
        # Arrange
        urls = {field: f"https://files.forms.test/{field}.jpg" for field in FIELDS}
        urls["selfie"] = "not a url"

        # Act
        result = await batch_orchestrator.ingest_batch(make_batch(owner_id, urls))

        # Assert
        assert result.completed == 4
        assert result.failed == 1
        assert result.failed_fields == ["selfie"]
        assert [r.source_field for r in result.results] == FIELDS
        selfie = result.results[1]
        assert selfie.error_code == ErrorCode.INVALID_URL
        assert selfie.document_id is None
        assert len(memory_record_store.records) == 4
        assert len(blob_store.paths()) == 4

    @pytest.mark.asyncio
    async def test_documents_are_fetched_concurrently(
        self,
        batch_orchestrator: IngestionOrchestrator,
        tracker: ConcurrencyTracker,
        owner_id: str,
    ) -> None:
        # Arrange
        urls = {field: f"https://files.forms.test/{field}.jpg" for field in FIELDS}

        # Act
        result = await batch_orchestrator.ingest_batch(make_batch(owner_id, urls))

        # Assert
        assert result.completed == len(FIELDS)
        assert tracker.peak > 1

    @pytest.mark.asyncio
    async def test_fetch_failure_keeps_its_record(
        self,
        batch_orchestrator: IngestionOrchestrator,
        memory_record_store,
        owner_id: str,
    ) -> None:
        # Arrange
        urls = {
            "selfie": "https://files.forms.test/selfie.jpg",
            "proof_of_address": "https://files.forms.test/missing.jpg",
        }

        # Act
        result = await batch_orchestrator.ingest_batch(make_batch(owner_id, urls))

        # Assert
        assert result.failed_fields == ["proof_of_address"]
        failed = memory_record_store.records[result.results[1].document_id]
        assert failed.status == DocumentStatus.FAILED
        assert failed.error_code == ErrorCode.NOT_FOUND
        assert failed.next_retry_at is None

    def test_batch_requires_at_least_one_document(self, owner_id: str) -> None:
        with pytest.raises(ValueError):
            BatchIngestionRequest(owner_id=owner_id, documents=[])

    def test_source_field_defaults_to_document_kind(self, owner_id: str) -> None:
        batch = BatchIngestionRequest(
            owner_id=owner_id,
            documents=[BatchDocument(document_kind="selfie", source_url="https://x.test/a.jpg")],
        )

        assert batch.to_requests()[0].source_field == "selfie"
