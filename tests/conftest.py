"""
Shared test fixtures and configuration for entire test suite.

Provides: in-memory SQLite database, settings with zero backoff, in-memory
blob store and record store doubles, httpx mock transport helpers
Dependencies: pytest, sqlalchemy, aiosqlite, httpx
System role: Test infrastructure and fixture management
"""

import asyncio
import uuid
from datetime import datetime, timedelta
from typing import Any, Callable
from uuid import UUID

import httpx
import pytest

from incident_docs.boundary.db.base import utc_now
from incident_docs.boundary.db.models.document_model import (
    DocumentCategory,
    DocumentModel,
    DocumentStatus,
)
from incident_docs.boundary.http.remote_fetcher import RemoteFetcher
from incident_docs.configs.ingestion import IngestionSettings
from incident_docs.configs.storage import StorageSettings
from incident_docs.core.document_processing.backoff import NON_RETRYABLE_CODES
from incident_docs.core.exceptions import DocumentNotFoundError, StorageError

JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"incident-photo" * 64


class InMemoryBlobStore:
    """Blob store double keyed by (bucket, path)."""

    def __init__(self, default_bucket: str = "user-documents") -> None:
        self.default_bucket = default_bucket
        self.objects: dict[tuple[str, str], tuple[bytes, str]] = {}
        self.fail_put = False
        self.fail_sign = False
        self.fail_move = False
        self.fail_delete = False
        self.put_calls = 0

    def _key(self, path: str, bucket: str | None) -> tuple[str, str]:
        return (bucket or self.default_bucket, path)

    async def put(self, data: bytes, path: str, content_type: str, bucket: str | None = None) -> str:
        await asyncio.sleep(0)
        self.put_calls += 1
        if self.fail_put:
            raise StorageError("Storage put failed: endpoint unreachable", operation="put", path=path)
        self.objects[self._key(path, bucket)] = (bytes(data), content_type)
        return path

    async def get(self, path: str, bucket: str | None = None) -> bytes:
        try:
            return self.objects[self._key(path, bucket)][0]
        except KeyError:
            raise StorageError("Storage get failed: NoSuchKey", operation="get", path=path)

    async def move(self, old_path: str, new_path: str, bucket: str | None = None) -> None:
        if self.fail_move:
            raise StorageError("Storage move failed", operation="move", path=old_path)
        self.objects[self._key(new_path, bucket)] = self.objects.pop(self._key(old_path, bucket))

    async def delete(self, path: str, bucket: str | None = None) -> None:
        if self.fail_delete:
            raise StorageError("Storage delete failed", operation="delete", path=path)
        self.objects.pop(self._key(path, bucket), None)

    async def sign(self, path: str, ttl_seconds: int, bucket: str | None = None) -> tuple[str, datetime]:
        if self.fail_sign:
            raise StorageError("Storage sign failed", operation="sign", path=path)
        url = f"https://storage.test/{bucket or self.default_bucket}/{path}?expires={ttl_seconds}"
        return url, utc_now() + timedelta(seconds=ttl_seconds)

    def paths(self, bucket: str | None = None) -> list[str]:
        return [path for (b, path) in self.objects if bucket is None or b == bucket]


class InMemoryRecordStore:
    """
    Record store double for concurrent scenarios.

    aiosqlite behind a StaticPool shares one connection, so tests that run
    document jobs concurrently use this instead of the SQL store.
    """

    def __init__(self) -> None:
        self.records: dict[UUID, DocumentModel] = {}

    async def insert(self, **fields: Any) -> DocumentModel:
        await asyncio.sleep(0)
        now = utc_now()
        values = {
            "id": uuid.uuid4(),
            "document_category": DocumentCategory.USER_SIGNUP,
            "source_type": "typeform",
            "checksum_algorithm": "sha256",
            "status": DocumentStatus.PENDING,
            "retry_count": 0,
            "max_retries": 3,
            "created_at": now,
            "updated_at": now,
        }
        values.update(fields)
        record = DocumentModel(**values)
        self.records[record.id] = record
        return record

    async def update(self, document_id: UUID, **fields: Any) -> DocumentModel:
        await asyncio.sleep(0)
        record = self.records.get(document_id)
        if record is None:
            raise DocumentNotFoundError(str(document_id))
        for key, value in fields.items():
            setattr(record, key, value)
        record.updated_at = utc_now()
        return record

    async def get(self, document_id: UUID, include_deleted: bool = False) -> DocumentModel | None:
        record = self.records.get(document_id)
        if record is None or (record.deleted_at is not None and not include_deleted):
            return None
        return record

    async def select_retry_candidates(self, now: datetime, limit: int) -> list[DocumentModel]:
        due = [
            r
            for r in self.records.values()
            if r.status == DocumentStatus.FAILED
            and r.deleted_at is None
            and r.retry_count < r.max_retries
            and (r.next_retry_at is None or r.next_retry_at <= now)
            and r.error_code not in NON_RETRYABLE_CODES
        ]
        due.sort(key=lambda r: (r.next_retry_at is not None, r.next_retry_at or now))
        return due[:limit]


def image_handler(
    body: bytes = JPEG_BYTES,
    content_type: str = "image/jpeg",
) -> Callable[[httpx.Request], httpx.Response]:
    """MockTransport handler serving `body` for every GET."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=body, headers={"content-type": content_type})

    return handler


class SwitchableHandler:
    """MockTransport handler whose behaviour can be swapped mid-test."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.handler = handler
        self.calls = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        return self.handler(request)


@pytest.fixture
def ingestion_settings() -> IngestionSettings:
    """Three-attempt budget with no backoff delay and no sweep pacing."""
    return IngestionSettings(
        max_retries=3,
        base_retry_delay_seconds=0,
        max_file_bytes=1024 * 1024,
        fetch_timeout_seconds=5,
        sweep_batch_limit=10,
        sweep_pacing_seconds=0,
    )


@pytest.fixture
def storage_settings() -> StorageSettings:
    return StorageSettings(
        region="eu-west-2",
        user_documents_bucket="user-documents",
        incident_bucket="incident-images",
    )


@pytest.fixture
def blob_store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture
def memory_record_store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def fetch_handler() -> SwitchableHandler:
    """Serves a small JPEG until the test swaps the handler."""
    return SwitchableHandler(image_handler())


@pytest.fixture
def fetcher(ingestion_settings: IngestionSettings, fetch_handler: SwitchableHandler) -> RemoteFetcher:
    return RemoteFetcher(ingestion_settings, transport=httpx.MockTransport(fetch_handler))


@pytest.fixture
async def db_engine():
    """
    Create in-memory SQLite async engine with all tables.

    Yields:
        AsyncEngine: Engine sharing one connection (lazy imported to avoid settings issues)
    """
    from sqlalchemy.ext.asyncio import create_async_engine
    from sqlalchemy.pool import StaticPool

    from incident_docs.boundary.db.base import Base

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    from incident_docs.boundary.db.connection import build_session_factory

    return build_session_factory(db_engine)


@pytest.fixture
async def test_async_db(session_factory):
    """
    Session on the in-memory database.

    Yields:
        AsyncSession: Test database session
    """
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def record_store(session_factory):
    from incident_docs.core.document_processing.database import DocumentRecordStore

    return DocumentRecordStore(session_factory)


@pytest.fixture
def orchestrator(record_store, fetcher, blob_store, ingestion_settings, storage_settings):
    from incident_docs.core.document_processing import IngestionOrchestrator

    return IngestionOrchestrator(
        record_store=record_store,
        fetcher=fetcher,
        blob_store=blob_store,
        settings=ingestion_settings,
        storage_settings=storage_settings,
    )


@pytest.fixture
def sweeper(record_store, orchestrator, ingestion_settings):
    from incident_docs.core.document_processing import RetrySweeper

    return RetrySweeper(record_store, orchestrator, ingestion_settings)


@pytest.fixture
def owner_id() -> str:
    return f"user-{uuid.uuid4().hex[:8]}"
