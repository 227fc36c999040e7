"""
Database engine management with SQLAlchemy async
"""

from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine
from sqlalchemy.pool import NullPool
from core.config import settings
import logging

logger = logging.getLogger(__name__)


def create_engine(database_url: str) -> AsyncEngine:
    """
    Create an async engine for one side of a migration.

    Connections are opened once per run and held for the whole batch,
    so pooling is disabled.
    """
    logger.debug(f"Creating engine for {database_url.split('@')[-1]}")
    return create_async_engine(
        database_url,
        echo=False,
        poolclass=NullPool,
        future=True
    )


def create_job_engines(job: str):
    """Create the (source, destination) engine pair configured for a job"""
    source_url, destination_url = settings.database_urls(job)
    return create_engine(source_url), create_engine(destination_url)
