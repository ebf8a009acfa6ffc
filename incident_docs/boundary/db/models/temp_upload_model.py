"""
Temporary upload ORM model.

Files uploaded during a form session before the owning user or incident
exists. Rows are claimed when the session is finalized and expire otherwise.

Dependencies: sqlalchemy, incident_docs.boundary.db.base
System role: Staging persistence for session-scoped uploads
"""

from datetime import datetime

from sqlalchemy import Boolean, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from incident_docs.boundary.db.base import Base, TimestampMixin, UTCDateTime, UUIDMixin


class TempUploadModel(Base, UUIDMixin, TimestampMixin):
    """
    Staged upload awaiting a claim.

    Attributes:
        session_id: Form session that produced the upload
        field_name: Form field the file was attached to
        storage_bucket: Bucket holding the staged object
        storage_path: temp/{session_id}/... object key
        file_size: Size in bytes
        mime_type: Content type given at upload
        checksum: SHA-256 hex digest computed at upload
        expires_at: After this time an unclaimed upload is removed
        claimed: True once finalization has taken ownership
        claimed_by_owner_id: Owner the upload was finalized for
        claimed_at: Claim timestamp
    """

    __tablename__ = "temp_uploads"
    __table_args__ = (Index("ix_temp_uploads_session", "session_id", "claimed"),)

    session_id: Mapped[str] = mapped_column(String(128), nullable=False)
    field_name: Mapped[str] = mapped_column(String(100), nullable=False)
    original_filename: Mapped[str | None] = mapped_column(String(255), nullable=True)
    storage_bucket: Mapped[str] = mapped_column(String(100), nullable=False)
    storage_path: Mapped[str] = mapped_column(String(1024), nullable=False)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False)
    mime_type: Mapped[str] = mapped_column(String(100), nullable=False)
    checksum: Mapped[str] = mapped_column(String(64), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    claimed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    claimed_by_owner_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    claimed_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
