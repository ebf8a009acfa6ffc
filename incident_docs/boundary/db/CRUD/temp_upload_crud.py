"""
Temporary upload CRUD operations.

Dependencies: sqlalchemy, incident_docs.boundary.db.models
System role: Staging persistence operations
"""

from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from incident_docs.boundary.db.CRUD.base_crud import BaseCRUD
from incident_docs.boundary.db.models.temp_upload_model import TempUploadModel


class TempUploadCRUD(BaseCRUD[TempUploadModel]):
    """CRUD operations for TempUploadModel, including the claim handshake."""

    def __init__(self) -> None:
        super().__init__(TempUploadModel)

    async def get_unclaimed_by_session(
        self,
        session: AsyncSession,
        session_id: str,
        now: datetime,
    ) -> Sequence[TempUploadModel]:
        """Unclaimed, unexpired uploads of one form session, oldest first."""
        stmt = (
            select(TempUploadModel)
            .where(
                TempUploadModel.session_id == session_id,
                TempUploadModel.claimed.is_(False),
                TempUploadModel.expires_at > now,
            )
            .order_by(TempUploadModel.created_at.asc())
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def claim(
        self,
        session: AsyncSession,
        id: UUID,
        owner_id: str,
        claimed_at: datetime,
    ) -> TempUploadModel | None:
        """
        Take ownership of an upload if nobody else has.

        The update is conditional on claimed being false, so two concurrent
        finalizations cannot both win.

        Returns:
            The claimed row, or None when already claimed or missing
        """
        stmt = (
            update(TempUploadModel)
            .where(TempUploadModel.id == id, TempUploadModel.claimed.is_(False))
            .values(claimed=True, claimed_by_owner_id=owner_id, claimed_at=claimed_at)
            .returning(TempUploadModel)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def release(self, session: AsyncSession, id: UUID) -> TempUploadModel | None:
        """Undo a claim so the upload can be finalized again."""
        return await self.update_by_id(
            session,
            id,
            claimed=False,
            claimed_by_owner_id=None,
            claimed_at=None,
        )

    async def get_expired_unclaimed(
        self,
        session: AsyncSession,
        now: datetime,
        limit: int | None = None,
    ) -> Sequence[TempUploadModel]:
        """Unclaimed uploads whose expiry has passed."""
        stmt = select(TempUploadModel).where(
            TempUploadModel.claimed.is_(False),
            TempUploadModel.expires_at <= now,
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()


temp_upload_crud = TempUploadCRUD()
