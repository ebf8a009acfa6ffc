"""
Retry failed document ingestions.

Cron entry point for the retry sweeper. Prints retry statistics, runs one
sweep (or lists what a sweep would pick, or retries a single document), then
prints statistics again.

Usage:
    incident-docs-retry [--limit N] [--dry-run] [--document-id ID]
    python -m incident_docs.scripts.retry_failed_documents --dry-run

Dependencies: incident_docs.core.document_processing, python-dotenv
System role: Scheduled retry job
"""

import argparse
import asyncio
import logging
import sys
import uuid
from uuid import UUID

from dotenv import load_dotenv

# Load environment variables from .env if present
load_dotenv()

from incident_docs.boundary.aws.s3_client import S3BlobStore
from incident_docs.boundary.db.connection import get_async_engine, get_async_session_factory
from incident_docs.boundary.http.remote_fetcher import RemoteFetcher
from incident_docs.configs import Settings, get_settings
from incident_docs.core.document_processing import IngestionOrchestrator, RetrySweeper
from incident_docs.core.document_processing.database import DocumentRecordStore
from incident_docs.core.document_processing.models import RetryStatistics
from incident_docs.core.exceptions import DocumentNotFoundError
from incident_docs.observability import configure_logging, set_correlation_id

logger = logging.getLogger(__name__)


def build_sweeper(settings: Settings) -> RetrySweeper:
    """Wire a RetrySweeper against the configured database, bucket and fetcher."""
    record_store = DocumentRecordStore(get_async_session_factory())
    orchestrator = IngestionOrchestrator(
        record_store=record_store,
        fetcher=RemoteFetcher(settings.ingestion),
        blob_store=S3BlobStore(settings.storage),
        settings=settings.ingestion,
        storage_settings=settings.storage,
    )
    return RetrySweeper(record_store, orchestrator, settings.ingestion)


def print_statistics(title: str, stats: RetryStatistics) -> None:
    print(f"\n=== {title} ===")
    print(f"Total documents:       {stats.total}")
    for status, count in sorted(stats.by_status.items()):
        print(f"  {status:<20} {count}")
    print(f"Needing retry now:     {stats.needing_retry}")
    print(f"Permanently failed:    {stats.permanently_failed}")
    print(f"Average retry count:   {stats.average_retry_count:.2f}")
    if stats.error_codes:
        print("Failed by error code:")
        for code, count in sorted(stats.error_codes.items(), key=lambda item: -item[1]):
            print(f"  {code:<20} {count}")


async def run(args: argparse.Namespace, sweeper: RetrySweeper) -> int:
    """
    Execute one invocation of the retry job.

    Returns:
        int: Process exit code
    """
    print_statistics("Before", await sweeper.get_retry_statistics())

    if args.document_id:
        try:
            outcome = await sweeper.retry_document_by_id(args.document_id)
        except DocumentNotFoundError as e:
            print(f"\n{e.message}")
            return 1
        print(f"\nDocument {outcome.document_id}: {outcome.status.value} (retry_count={outcome.retry_count})")
        if outcome.error_code:
            print(f"  {outcome.error_code.value}: {outcome.error_message}")

    elif args.dry_run:
        candidates = await sweeper.preview(limit=args.limit)
        print(f"\nDry run: {len(candidates)} documents would be retried")
        for candidate in candidates:
            code = candidate.error_code.value if candidate.error_code else "-"
            print(
                f"  {candidate.document_id} owner={candidate.owner_id} kind={candidate.document_kind} "
                f"attempts={candidate.retry_count}/{candidate.max_retries} last_error={code}"
            )

    else:
        summary = await sweeper.sweep(limit=args.limit)
        print(
            f"\nSweep: processed={summary.processed} succeeded={summary.succeeded} "
            f"failed={summary.failed} permanently_failed={summary.permanently_failed} "
            f"skipped={summary.skipped} ({summary.duration_ms:.0f} ms)"
        )

    print_statistics("After", await sweeper.get_retry_statistics())
    return 0


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Retry failed document ingestions")
    parser.add_argument("--limit", type=int, default=None, help="Maximum documents to retry")
    parser.add_argument("--dry-run", action="store_true", help="List candidates without retrying")
    parser.add_argument("--document-id", type=UUID, default=None, help="Retry one document by id")
    return parser.parse_args(argv)


async def _main(args: argparse.Namespace) -> int:
    try:
        return await run(args, build_sweeper(get_settings()))
    finally:
        await get_async_engine().dispose()


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level)
    set_correlation_id(f"retry-{uuid.uuid4().hex[:12]}")

    try:
        exit_code = asyncio.run(_main(args))
    except Exception:
        logger.exception("Retry job failed")
        exit_code = 1
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
