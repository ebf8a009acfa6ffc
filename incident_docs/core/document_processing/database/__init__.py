"""Persistence helpers for the ingestion pipeline."""

from incident_docs.core.document_processing.database.document_record_store import DocumentRecordStore
from incident_docs.core.document_processing.database.document_status_updater import (
    DocumentStatusUpdater,
)

__all__ = ["DocumentRecordStore", "DocumentStatusUpdater"]
