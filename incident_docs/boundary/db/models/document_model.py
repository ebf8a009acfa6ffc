"""
Document ORM model.

One row per ingested file: identity, ownership, source location, storage
placement, integrity digests and retry bookkeeping.

Dependencies: sqlalchemy, incident_docs.boundary.db.base
System role: Document persistence for the ingestion and retry pipeline
"""

import enum
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Enum, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from incident_docs.boundary.db.base import Base, TimestampMixin, UTCDateTime, UUIDMixin


class DocumentStatus(str, enum.Enum):
    """
    Document processing lifecycle states.

    PENDING: Record created, no fetch attempted yet
    PROCESSING: A fetch/upload attempt is in flight
    COMPLETED: Stored, checksummed and signed; terminal
    FAILED: Last attempt failed; error_code says whether a retry is scheduled
    """

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class DocumentCategory(str, enum.Enum):
    """Groups document kinds by the flow that produced them."""

    USER_SIGNUP = "user_signup"
    INCIDENT_REPORT = "incident_report"
    OTHER = "other"


class ErrorCode(str, enum.Enum):
    """Closed set of failure categories recorded on a document."""

    AUTH_ERROR = "AUTH_ERROR"
    NOT_FOUND = "NOT_FOUND"
    TIMEOUT = "TIMEOUT"
    RATE_LIMIT = "RATE_LIMIT"
    SERVER_ERROR = "SERVER_ERROR"
    DNS_ERROR = "DNS_ERROR"
    CONNECTION_REFUSED = "CONNECTION_REFUSED"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    STORAGE_UPLOAD_ERROR = "STORAGE_UPLOAD_ERROR"
    SIGNED_URL_ERROR = "SIGNED_URL_ERROR"
    PROCESSING_ERROR = "PROCESSING_ERROR"
    INVALID_URL = "INVALID_URL"
    MAX_RETRIES_EXCEEDED = "MAX_RETRIES_EXCEEDED"


class DocumentModel(Base, UUIDMixin, TimestampMixin):
    """
    Document ORM model tracking ingestion and retry state.

    Lifecycle: PENDING → PROCESSING → COMPLETED, or FAILED and back to
    PROCESSING through the retry sweeper until max_retries is spent.

    Invariants:
        COMPLETED rows carry storage_path, original_checksum and signed_url.
        FAILED rows carry error_code and error_message.
        original_checksum never changes once written.
        Rows with deleted_at set are hidden from every non-admin query.
    """

    __tablename__ = "documents"
    __table_args__ = (
        Index("ix_documents_owner_created", "owner_id", "created_at"),
        Index("ix_documents_retry", "status", "next_retry_at"),
    )

    # Ownership and classification
    owner_id: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
        doc="Subject the document belongs to",
    )
    document_kind: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        doc="Form-level kind, e.g. driving_license_picture",
    )
    document_category: Mapped[DocumentCategory] = mapped_column(
        Enum(DocumentCategory, native_enum=False, length=32),
        nullable=False,
        default=DocumentCategory.USER_SIGNUP,
    )
    associated_with: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
        doc="Type of the entity this document is attached to (weak reference)",
    )
    associated_id: Mapped[str | None] = mapped_column(
        String(128),
        nullable=True,
        doc="Id of the attached entity; no foreign key",
    )

    # Source
    source_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="typeform",
    )
    source_url: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        doc="Remote location kept for retries; empty for staged uploads",
    )
    source_field: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Storage
    original_filename: Mapped[str | None] = mapped_column(String(255), nullable=True)
    storage_bucket: Mapped[str | None] = mapped_column(String(100), nullable=True)
    storage_path: Mapped[str | None] = mapped_column(
        String(1024),
        nullable=True,
        doc="Object key, set once upload succeeds",
    )
    file_size: Mapped[int | None] = mapped_column(Integer, nullable=True)
    mime_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    file_extension: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # Integrity
    original_checksum: Mapped[str | None] = mapped_column(String(64), nullable=True)
    current_checksum: Mapped[str | None] = mapped_column(String(64), nullable=True)
    checksum_algorithm: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="sha256",
    )
    checksum_verified_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    # Status machine
    status: Mapped[DocumentStatus] = mapped_column(
        Enum(DocumentStatus, native_enum=False, length=20),
        nullable=False,
        default=DocumentStatus.PENDING,
    )
    retry_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_retries: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    next_retry_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    last_retry_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    error_message: Mapped[str | None] = mapped_column(
        String(2048),
        nullable=True,
        doc="Error details if processing failed",
    )
    error_code: Mapped[ErrorCode | None] = mapped_column(
        Enum(ErrorCode, native_enum=False, length=32),
        nullable=True,
    )
    error_details: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    # Access
    signed_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    signed_url_expires_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    # Processing timestamps
    processing_started_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    processing_completed_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    processing_duration_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)

    deleted_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    @property
    def is_permanently_failed(self) -> bool:
        """True when the sweeper will never pick this record up again."""
        if self.status != DocumentStatus.FAILED:
            return False
        return self.retry_count >= self.max_retries or self.next_retry_at is None

    def __repr__(self) -> str:
        return (
            f"<DocumentModel id={self.id} owner={self.owner_id} "
            f"kind={self.document_kind} status={self.status}>"
        )
