"""
Document CRUD operations.

Provides Create, Read, Update operations for DocumentModel with the
queries the ingestion pipeline needs: soft-delete scoping, owner listings,
retry candidate selection and retry statistics.

Dependencies: sqlalchemy, incident_docs.boundary.db.models
System role: Document persistence operations
"""

from datetime import datetime
from typing import Any, Iterable, Sequence
from uuid import UUID

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from incident_docs.boundary.db.CRUD.base_crud import BaseCRUD
from incident_docs.boundary.db.models.document_model import (
    DocumentCategory,
    DocumentModel,
    DocumentStatus,
    ErrorCode,
)


class DocumentCRUD(BaseCRUD[DocumentModel]):
    """
    CRUD operations for DocumentModel.

    Every read hides soft-deleted rows unless include_deleted=True is passed
    explicitly (administrative lookups only).
    """

    def __init__(self) -> None:
        """Initialize DocumentCRUD with DocumentModel."""
        super().__init__(DocumentModel)

    async def get_by_id(
        self,
        session: AsyncSession,
        id: UUID,
        include_deleted: bool = False,
    ) -> DocumentModel | None:
        """
        Retrieve a document by id.

        Args:
            session: Async database session
            id: Document UUID
            include_deleted: Also return soft-deleted rows

        Returns:
            DocumentModel if visible, None otherwise
        """
        stmt = select(DocumentModel).where(DocumentModel.id == id)
        if not include_deleted:
            stmt = stmt.where(DocumentModel.deleted_at.is_(None))
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_owner(
        self,
        session: AsyncSession,
        owner_id: str,
        status: DocumentStatus | None = None,
        document_kind: str | None = None,
        document_category: DocumentCategory | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> Sequence[DocumentModel]:
        """
        List an owner's documents, newest first.

        Args:
            session: Async database session
            owner_id: Owner to list for
            status: Optional status filter
            document_kind: Optional kind filter
            document_category: Optional category filter
            limit: Maximum number of documents to return
            offset: Number of documents to skip

        Returns:
            Sequence of visible DocumentModels
        """
        stmt = (
            select(DocumentModel)
            .where(*self._owner_filters(owner_id, status, document_kind, document_category))
            .order_by(DocumentModel.created_at.desc())
            .offset(offset)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def count_by_owner(
        self,
        session: AsyncSession,
        owner_id: str,
        status: DocumentStatus | None = None,
        document_kind: str | None = None,
        document_category: DocumentCategory | None = None,
    ) -> int:
        """Count an owner's visible documents under the same filters as get_by_owner."""
        stmt = (
            select(func.count())
            .select_from(DocumentModel)
            .where(*self._owner_filters(owner_id, status, document_kind, document_category))
        )
        return (await session.scalar(stmt)) or 0

    @staticmethod
    def _owner_filters(
        owner_id: str,
        status: DocumentStatus | None,
        document_kind: str | None,
        document_category: DocumentCategory | None,
    ) -> list:
        clauses = [
            DocumentModel.owner_id == owner_id,
            DocumentModel.deleted_at.is_(None),
        ]
        if status is not None:
            clauses.append(DocumentModel.status == status)
        if document_kind is not None:
            clauses.append(DocumentModel.document_kind == document_kind)
        if document_category is not None:
            clauses.append(DocumentModel.document_category == document_category)
        return clauses

    def _retry_eligible(self, now: datetime, excluded_codes: Iterable[ErrorCode]):
        """Predicate shared by candidate selection and statistics."""
        excluded = list(excluded_codes)
        clauses = [
            DocumentModel.status == DocumentStatus.FAILED,
            DocumentModel.deleted_at.is_(None),
            DocumentModel.retry_count < DocumentModel.max_retries,
            or_(
                DocumentModel.next_retry_at.is_(None),
                DocumentModel.next_retry_at <= now,
            ),
        ]
        if excluded:
            clauses.append(
                or_(
                    DocumentModel.error_code.is_(None),
                    DocumentModel.error_code.not_in(excluded),
                )
            )
        return and_(*clauses)

    async def get_retry_candidates(
        self,
        session: AsyncSession,
        now: datetime,
        limit: int,
        excluded_codes: Iterable[ErrorCode] = (),
    ) -> Sequence[DocumentModel]:
        """
        Select failed documents that are due for another attempt.

        Args:
            session: Async database session
            now: Reference time for the backoff deadline
            limit: Maximum number of documents to return
            excluded_codes: Error codes that are never retried

        Returns:
            Due documents, oldest deadline first (never-scheduled rows first)
        """
        stmt = (
            select(DocumentModel)
            .where(self._retry_eligible(now, excluded_codes))
            .order_by(DocumentModel.next_retry_at.asc().nulls_first())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def soft_delete(
        self,
        session: AsyncSession,
        id: UUID,
        deleted_at: datetime,
    ) -> DocumentModel | None:
        """
        Hide a document from normal reads.

        Args:
            session: Async database session
            id: Document UUID
            deleted_at: Deletion timestamp

        Returns:
            Updated DocumentModel, None if missing or already deleted
        """
        document = await self.get_by_id(session, id)
        if document is None:
            return None
        return await self.update_by_id(session, id, deleted_at=deleted_at)

    async def get_retry_statistics(
        self,
        session: AsyncSession,
        now: datetime,
        excluded_codes: Iterable[ErrorCode] = (),
    ) -> dict[str, Any]:
        """
        Aggregate retry bookkeeping over visible documents.

        Args:
            session: Async database session
            now: Reference time for "due now"
            excluded_codes: Error codes that are never retried

        Returns:
            dict with total, by_status, needing_retry, permanently_failed,
            average_retry_count and error_codes
        """
        visible = DocumentModel.deleted_at.is_(None)

        status_rows = await session.execute(
            select(DocumentModel.status, func.count())
            .where(visible)
            .group_by(DocumentModel.status)
        )
        by_status = {status.value: count for status, count in status_rows.all()}

        needing_retry = await session.scalar(
            select(func.count())
            .select_from(DocumentModel)
            .where(self._retry_eligible(now, excluded_codes))
        )

        failed = and_(visible, DocumentModel.status == DocumentStatus.FAILED)
        permanently_failed = await session.scalar(
            select(func.count())
            .select_from(DocumentModel)
            .where(
                failed,
                or_(
                    DocumentModel.retry_count >= DocumentModel.max_retries,
                    DocumentModel.next_retry_at.is_(None),
                ),
            )
        )

        average_retry_count = await session.scalar(
            select(func.avg(DocumentModel.retry_count)).where(failed)
        )

        code_rows = await session.execute(
            select(DocumentModel.error_code, func.count())
            .where(failed, DocumentModel.error_code.is_not(None))
            .group_by(DocumentModel.error_code)
        )
        error_codes = {code.value: count for code, count in code_rows.all()}

        return {
            "total": sum(by_status.values()),
            "by_status": by_status,
            "needing_retry": needing_retry or 0,
            "permanently_failed": permanently_failed or 0,
            "average_retry_count": float(average_retry_count or 0.0),
            "error_codes": error_codes,
        }


document_crud = DocumentCRUD()
