"""
Script to run the configured migration jobs
"""

import asyncio
import sys
import os
import logging
from typing import Any, Dict, List, Optional

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from core.config import settings
from core.database import create_job_engines
from core.logging import setup_logging
from migration.pipelines import JOBS, build_job
from migration.runner import MigrationRunner

logger = logging.getLogger(__name__)


async def run_job(job: str) -> Dict[str, Dict[str, Any]]:
    """Run one job over its own source/destination connection pair"""
    source_engine, destination_engine = create_job_engines(job)
    try:
        runner = MigrationRunner(source_engine, destination_engine)
        return await runner.run(build_job(job))
    finally:
        await source_engine.dispose()
        await destination_engine.dispose()


async def run_migrations(jobs: Optional[List[str]] = None) -> Dict[str, Dict[str, Dict[str, Any]]]:
    """
    Run migration jobs sequentially.

    Args:
        jobs: Job names to run; defaults to settings.MIGRATION_JOBS, or
            every job when that is empty

    Returns:
        Mapping of job name to its per-pipeline results

    Raises:
        ValueError: For an unknown job name
        MigrationException: When a job hits a fatal error; later jobs
            are not run
    """
    jobs = jobs or settings.MIGRATION_JOBS or list(JOBS)

    unknown = [job for job in jobs if job not in JOBS]
    if unknown:
        raise ValueError(f"Unknown migration jobs: {', '.join(unknown)}")

    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Jobs to run: {', '.join(jobs)}")

    results = {}
    for job in jobs:
        logger.info(f"=== STARTING {job.upper()} MIGRATION ===")
        results[job] = await run_job(job)

        for pipeline, result in results[job].items():
            logger.info(
                f"{pipeline}: {result['status']} - "
                f"Extracted={result['records_extracted']}, "
                f"Loaded={result['records_loaded']}, "
                f"Failed={result['records_failed']}"
            )
        logger.info(f"=== COMPLETED {job.upper()} MIGRATION ===")

    logger.info("All migration jobs completed")
    return results


def main(jobs: Optional[List[str]] = None) -> int:
    """Entry point; returns the process exit status"""
    setup_logging()
    try:
        asyncio.run(run_migrations(jobs))
    except Exception as e:
        logger.error(f"Migration failed: {str(e)}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
