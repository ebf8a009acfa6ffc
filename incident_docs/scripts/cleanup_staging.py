"""
Remove expired staged uploads.

Deletes unclaimed uploads older than their staging TTL together with their
objects under temp/.

Usage:
    incident-docs-cleanup-staging [--limit N]

Dependencies: incident_docs.core.document_processing, python-dotenv
System role: Scheduled staging cleanup job
"""

import argparse
import asyncio
import logging
import sys
import uuid

from dotenv import load_dotenv

# Load environment variables from .env if present
load_dotenv()

from incident_docs.boundary.aws.s3_client import S3BlobStore
from incident_docs.boundary.db.connection import get_async_engine, get_async_session_factory
from incident_docs.configs import get_settings
from incident_docs.core.document_processing import StagingWorkflow
from incident_docs.core.document_processing.database import DocumentRecordStore
from incident_docs.observability import configure_logging, set_correlation_id

logger = logging.getLogger(__name__)


async def cleanup(limit: int | None = None) -> int:
    """
    Run expire_stale once against the configured database and bucket.

    Returns:
        int: Number of uploads removed
    """
    settings = get_settings()
    session_factory = get_async_session_factory()
    workflow = StagingWorkflow(
        session_factory=session_factory,
        record_store=DocumentRecordStore(session_factory),
        blob_store=S3BlobStore(settings.storage),
        storage_settings=settings.storage,
        ingestion_settings=settings.ingestion,
    )
    try:
        return await workflow.expire_stale(limit=limit)
    finally:
        await get_async_engine().dispose()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Remove expired staged uploads")
    parser.add_argument("--limit", type=int, default=None, help="Maximum uploads to remove")
    args = parser.parse_args(argv)

    configure_logging(get_settings().log_level)
    set_correlation_id(f"cleanup-{uuid.uuid4().hex[:12]}")

    try:
        removed = asyncio.run(cleanup(args.limit))
    except Exception:
        logger.exception("Staging cleanup failed")
        sys.exit(1)
    print(f"Removed {removed} expired staged uploads")


if __name__ == "__main__":
    main()
