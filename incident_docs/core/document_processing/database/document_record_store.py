"""
Document record store.

Narrow persistence contract used by the orchestrator and sweeper: insert,
partial update by id, get by id and retry-candidate selection. Each call runs
in its own short session and commits before returning, so concurrent
document jobs never share a session.

Dependencies: sqlalchemy, incident_docs.boundary.db
System role: Metadata store adapter for the ingestion pipeline
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, AsyncIterator, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from incident_docs.boundary.db.CRUD.document_crud import document_crud
from incident_docs.boundary.db.models.document_model import DocumentModel
from incident_docs.core.document_processing.backoff import NON_RETRYABLE_CODES
from incident_docs.core.exceptions import DocumentNotFoundError

logger = logging.getLogger(__name__)


class DocumentRecordStore:
    """SQLAlchemy-backed store for DocumentModel rows."""

    def __init__(self, session_factory: async_sessionmaker) -> None:
        """
        Args:
            session_factory: Factory producing AsyncSession instances
        """
        self._session_factory = session_factory

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[AsyncSession]:
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def insert(self, **fields: Any) -> DocumentModel:
        """Insert a new record and return it with its generated id."""
        async with self._transaction() as session:
            return await document_crud.create(session, **fields)

    async def update(self, document_id: UUID, **fields: Any) -> DocumentModel:
        """
        Apply a partial update to one record.

        Raises:
            DocumentNotFoundError: No row with this id
        """
        async with self._transaction() as session:
            document = await document_crud.update_by_id(session, document_id, **fields)
            if document is None:
                raise DocumentNotFoundError(str(document_id))
            return document

    async def get(self, document_id: UUID, include_deleted: bool = False) -> DocumentModel | None:
        async with self._session_factory() as session:
            return await document_crud.get_by_id(session, document_id, include_deleted=include_deleted)

    async def select_retry_candidates(self, now: datetime, limit: int) -> Sequence[DocumentModel]:
        """Failed, non-deleted records under budget whose backoff has elapsed."""
        async with self._session_factory() as session:
            return await document_crud.get_retry_candidates(
                session,
                now=now,
                limit=limit,
                excluded_codes=NON_RETRYABLE_CODES,
            )

    async def get_retry_statistics(self, now: datetime) -> dict[str, Any]:
        async with self._session_factory() as session:
            return await document_crud.get_retry_statistics(
                session,
                now=now,
                excluded_codes=NON_RETRYABLE_CODES,
            )
