"""
Document ingestion and retry pipeline.

Fetches remote documents, checksums and stores them, records every step on
the document record, and retries transient failures with exponential
backoff.

Dependencies: httpx, boto3, sqlalchemy, pydantic
System role: Document ingestion pipeline entrypoint
"""

from .orchestrator import IngestionOrchestrator
from .retry_sweeper import RetrySweeper
from .staging import StagingWorkflow

__all__ = [
    "IngestionOrchestrator",
    "RetrySweeper",
    "StagingWorkflow",
]
