"""API-specific dependencies."""

# Re-export common dependencies
from .dependencies import (
    get_blob_store,
    get_document_service,
    get_orchestrator,
    get_service_cache,
    get_settings_dependency,
    get_staging_workflow,
    get_sweeper,
)

__all__ = [
    "get_blob_store",
    "get_document_service",
    "get_orchestrator",
    "get_service_cache",
    "get_settings_dependency",
    "get_staging_workflow",
    "get_sweeper",
]
