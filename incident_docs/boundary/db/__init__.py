"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, UUIDMixin, TimestampMixin, UTCDateTime: Model building blocks
  - get_async_engine(), get_async_session_factory(), get_async_db(): Async connection management
  - DocumentModel, TempUploadModel: Persisted entities
  - DocumentStatus, DocumentCategory, ErrorCode: Enum types for state tracking
  - document_crud, temp_upload_crud: CRUD operation singletons

Dependencies: sqlalchemy, incident_docs.configs
System role: Database adapter for document records and staged uploads
"""

from incident_docs.boundary.db.base import Base, TimestampMixin, UTCDateTime, UUIDMixin
from incident_docs.boundary.db.connection import (
    build_session_factory,
    get_async_db,
    get_async_engine,
    get_async_session_factory,
)
from incident_docs.boundary.db.models import (
    DocumentCategory,
    DocumentModel,
    DocumentStatus,
    ErrorCode,
    TempUploadModel,
)
from incident_docs.boundary.db.CRUD import (
    BaseCRUD,
    DocumentCRUD,
    TempUploadCRUD,
    document_crud,
    temp_upload_crud,
)

__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    "UTCDateTime",
    "UUIDMixin",
    # Connection
    "build_session_factory",
    "get_async_db",
    "get_async_engine",
    "get_async_session_factory",
    # Models
    "DocumentCategory",
    "DocumentModel",
    "DocumentStatus",
    "ErrorCode",
    "TempUploadModel",
    # CRUD
    "BaseCRUD",
    "DocumentCRUD",
    "TempUploadCRUD",
    "document_crud",
    "temp_upload_crud",
]
