"""
Models for the document ingestion pipeline.

Exports: IngestionRequest, BatchIngestionRequest, BatchDocument, IngestionResult,
BatchIngestionResult, RetryStatus, RetryOutcome, SweepSummary, RetryCandidate,
RetryStatistics, StagedUpload, StagedDocumentResult, FinalizeResult, FinalizeStatus
"""

from .ingestion_request import BatchDocument, BatchIngestionRequest, IngestionRequest
from .ingestion_result import BatchIngestionResult, IngestionResult
from .staging import FinalizeResult, FinalizeStatus, StagedDocumentResult, StagedUpload
from .sweep_summary import (
    RetryCandidate,
    RetryOutcome,
    RetryStatistics,
    RetryStatus,
    SweepSummary,
)

__all__ = [
    "BatchDocument",
    "FinalizeResult",
    "FinalizeStatus",
    "BatchIngestionRequest",
    "BatchIngestionResult",
    "IngestionRequest",
    "IngestionResult",
    "RetryCandidate",
    "RetryOutcome",
    "RetryStatistics",
    "RetryStatus",
    "StagedDocumentResult",
    "StagedUpload",
    "SweepSummary",
]
