"""
Test suite for the retry cron entry point.

System role: Verification of the retry job's command line behaviour
"""

from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from incident_docs.boundary.db.models.document_model import ErrorCode
from incident_docs.core.document_processing.models import (
    RetryCandidate,
    RetryOutcome,
    RetryStatistics,
    RetryStatus,
    SweepSummary,
)
from incident_docs.core.exceptions import DocumentNotFoundError
from incident_docs.scripts.retry_failed_documents import parse_args, run

STATS = RetryStatistics(
    total=3,
    by_status={"completed": 1, "failed": 2},
    needing_retry=1,
    permanently_failed=1,
    average_retry_count=2.0,
    error_codes={"TIMEOUT": 1, "MAX_RETRIES_EXCEEDED": 1},
)


@pytest.fixture
def mock_sweeper() -> AsyncMock:
    sweeper = AsyncMock()
    sweeper.get_retry_statistics.return_value = STATS
    return sweeper


class TestParseArgs:
    def test_defaults(self) -> None:
        args = parse_args([])

        assert args.limit is None
        assert args.dry_run is False
        assert args.document_id is None

    def test_document_id_is_parsed_as_uuid(self) -> None:
        document_id = uuid4()

        args = parse_args(["--document-id", str(document_id), "--limit", "5"])

        assert args.document_id == document_id
        assert args.limit == 5


class TestRun:
    @pytest.mark.asyncio
    async def test_sweep_prints_before_and_after(self, mock_sweeper: AsyncMock, capsys) -> None:
        # Arrange
        mock_sweeper.sweep.return_value = SweepSummary(processed=1, succeeded=1)

        # Act
        exit_code = await run(parse_args(["--limit", "3"]), mock_sweeper)

        # Assert
        out = capsys.readouterr().out
        assert exit_code == 0
        assert "=== Before ===" in out and "=== After ===" in out
        assert "processed=1 succeeded=1" in out
        mock_sweeper.sweep.assert_awaited_once_with(limit=3)

    @pytest.mark.asyncio
    async def test_dry_run_does_not_sweep(self, mock_sweeper: AsyncMock, capsys) -> None:
        # Arrange
        mock_sweeper.preview.return_value = [
            RetryCandidate(
                document_id=uuid4(),
                owner_id="user-1",
                document_kind="selfie",
                retry_count=1,
                max_retries=3,
                error_code=ErrorCode.TIMEOUT,
            )
        ]

        # Act
        exit_code = await run(parse_args(["--dry-run"]), mock_sweeper)

        # Assert
        assert exit_code == 0
        assert "1 documents would be retried" in capsys.readouterr().out
        mock_sweeper.sweep.assert_not_called()

    @pytest.mark.asyncio
    async def test_single_document(self, mock_sweeper: AsyncMock, capsys) -> None:
        # Arrange
        document_id = uuid4()
        mock_sweeper.retry_document_by_id.return_value = RetryOutcome(
            document_id=document_id,
            status=RetryStatus.FAILED,
            retry_count=2,
            error_code=ErrorCode.SERVER_ERROR,
            error_message="Source returned HTTP 503",
        )

        # Act
        exit_code = await run(parse_args(["--document-id", str(document_id)]), mock_sweeper)

        # Assert
        out = capsys.readouterr().out
        assert exit_code == 0
        assert "failed (retry_count=2)" in out
        assert "SERVER_ERROR" in out

    @pytest.mark.asyncio
    async def test_unknown_document_exits_non_zero(self, mock_sweeper: AsyncMock) -> None:
        # Arrange
        document_id = uuid4()
        mock_sweeper.retry_document_by_id.side_effect = DocumentNotFoundError(str(document_id))

        # Act
        exit_code = await run(parse_args(["--document-id", str(document_id)]), mock_sweeper)

        # Assert
        assert exit_code == 1
