"""
Database table creation script.

Creates all tables defined in ORM models using SQLAlchemy metadata.

Dependencies: sqlalchemy, incident_docs.configs
System role: Database schema initialization

Usage:
    incident-docs-create-tables
    python -m incident_docs.boundary.db.create_tables
"""

import asyncio
import logging

from dotenv import load_dotenv

from incident_docs.boundary.db.base import Base
from incident_docs.boundary.db.connection import get_async_engine

# Import all models to register them with Base.metadata
from incident_docs.boundary.db.models import DocumentModel, TempUploadModel  # noqa: F401
from incident_docs.observability.logger import configure_logging

logger = logging.getLogger(__name__)


async def create_all_tables() -> None:
    """
    Create all database tables from registered ORM models.

    Idempotent: existing tables are left unchanged.

    Raises:
        SQLAlchemyError: If the connection or DDL fails
    """
    engine = get_async_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Tables created", extra={"tables": sorted(Base.metadata.tables)})


async def drop_all_tables() -> None:
    """
    Drop all database tables and their data.

    WARNING: Irreversible data loss. Only use in development environments.
    """
    engine = get_async_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    logger.warning("All tables dropped")


async def _create_and_dispose() -> None:
    try:
        await create_all_tables()
    finally:
        await get_async_engine().dispose()


def main() -> None:
    load_dotenv()
    configure_logging()
    asyncio.run(_create_and_dispose())


if __name__ == "__main__":
    main()
