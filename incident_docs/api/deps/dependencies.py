"""
Dependency injection container.

Factory functions for FastAPI dependencies.

Dependencies: incident_docs.configs, incident_docs.application, incident_docs.boundary, incident_docs.core
System role: DI container for service injection
"""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from incident_docs.application.services import DocumentService
from incident_docs.boundary.db import get_async_db
from incident_docs.configs import Settings, get_settings
from incident_docs.core.document_processing import (
    IngestionOrchestrator,
    RetrySweeper,
    StagingWorkflow,
)


class ServiceCache:
    """Container for cached pipeline instances."""

    def __init__(self):
        self._blob_store = None
        self._fetcher = None
        self._record_store = None
        self._orchestrator = None
        self._sweeper = None
        self._staging = None

    @property
    def blob_store(self):
        """Get cached S3 blob store."""
        if self._blob_store is None:
            from incident_docs.boundary.aws.s3_client import S3BlobStore

            self._blob_store = S3BlobStore(get_settings().storage)
        return self._blob_store

    @property
    def fetcher(self):
        """Get cached remote fetcher."""
        if self._fetcher is None:
            from incident_docs.boundary.http.remote_fetcher import RemoteFetcher

            self._fetcher = RemoteFetcher(get_settings().ingestion)
        return self._fetcher

    @property
    def record_store(self):
        """Get cached document record store."""
        if self._record_store is None:
            from incident_docs.boundary.db.connection import get_async_session_factory
            from incident_docs.core.document_processing.database import DocumentRecordStore

            self._record_store = DocumentRecordStore(get_async_session_factory())
        return self._record_store

    @property
    def orchestrator(self) -> IngestionOrchestrator:
        """Get cached ingestion orchestrator."""
        if self._orchestrator is None:
            settings = get_settings()
            self._orchestrator = IngestionOrchestrator(
                record_store=self.record_store,
                fetcher=self.fetcher,
                blob_store=self.blob_store,
                settings=settings.ingestion,
                storage_settings=settings.storage,
            )
        return self._orchestrator

    @property
    def sweeper(self) -> RetrySweeper:
        """Get cached retry sweeper."""
        if self._sweeper is None:
            self._sweeper = RetrySweeper(
                record_store=self.record_store,
                orchestrator=self.orchestrator,
                settings=get_settings().ingestion,
            )
        return self._sweeper

    @property
    def staging(self) -> StagingWorkflow:
        """Get cached staging workflow."""
        if self._staging is None:
            from incident_docs.boundary.db.connection import get_async_session_factory

            settings = get_settings()
            self._staging = StagingWorkflow(
                session_factory=get_async_session_factory(),
                record_store=self.record_store,
                blob_store=self.blob_store,
                storage_settings=settings.storage,
                ingestion_settings=settings.ingestion,
            )
        return self._staging

    def clear(self) -> None:
        """Clear all cached instances."""
        self._blob_store = None
        self._fetcher = None
        self._record_store = None
        self._orchestrator = None
        self._sweeper = None
        self._staging = None


# Global service cache
_service_cache = ServiceCache()


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    return _service_cache


@lru_cache
def get_settings_dependency() -> Settings:
    """Get settings singleton."""
    return get_settings()


def get_blob_store():
    """
    Get blob store for signing and reading stored documents.

    Returns:
        S3BlobStore: Client for document bucket operations
    """
    return get_service_cache().blob_store


def get_orchestrator() -> IngestionOrchestrator:
    """Get the ingestion orchestrator."""
    return get_service_cache().orchestrator


def get_sweeper() -> RetrySweeper:
    """Get the retry sweeper."""
    return get_service_cache().sweeper


def get_staging_workflow() -> StagingWorkflow:
    """Get the staging workflow."""
    return get_service_cache().staging


def get_document_service(
    db: AsyncSession = Depends(get_async_db),
    blob_store=Depends(get_blob_store),
) -> DocumentService:
    """
    Get document service instance.

    Args:
        db: Async database session (injected via Depends)
        blob_store: Blob store (injected via Depends)

    Returns:
        DocumentService: Document service bound to the request session
    """
    return DocumentService(
        db=db,
        blob_store=blob_store,
        storage_settings=get_settings().storage,
    )
