"""API routers."""

from .documents import router as documents_router
from .health import router as health_router
from .ingestion import router as ingestion_router
from .retries import router as retries_router
from .staging import router as staging_router

__all__ = [
    "documents_router",
    "health_router",
    "ingestion_router",
    "retries_router",
    "staging_router",
]
