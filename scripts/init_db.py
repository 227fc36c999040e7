import asyncio
import logging
import sys
import os

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from core.config import settings
from core.database import create_engine
from core.logging import setup_logging
from migration.pipelines import JOBS, build_job
from models.base import metadata

logger = logging.getLogger(__name__)


async def init_database(jobs=None):
    """Create the destination tables of every job without migrating"""
    for job in jobs or list(JOBS):
        tables = []
        for pipeline in build_job(job):
            for table in pipeline.tables:
                if table not in tables:
                    tables.append(table)

        _, destination_url = settings.database_urls(job)
        engine = create_engine(destination_url)
        try:
            async with engine.begin() as conn:
                logger.info(f"Creating tables for {job}: {', '.join(t.name for t in tables)}")
                await conn.run_sync(metadata.create_all, tables=tables)
        finally:
            await engine.dispose()

    logger.info("Tables created successfully.")


if __name__ == "__main__":
    setup_logging()
    asyncio.run(init_database())
