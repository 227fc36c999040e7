"""
Logging configuration
"""

import logging
import sys
from typing import Optional
from core.config import settings


class PipelineLoggerAdapter(logging.LoggerAdapter):
    """Prefix every message with the pipeline tag, e.g. ``[user_profile]``"""

    def process(self, msg, kwargs):
        return f"[{self.extra['pipeline']}] {msg}", kwargs


def get_pipeline_logger(name: str, pipeline: str) -> PipelineLoggerAdapter:
    """Return a logger whose messages carry the pipeline name"""
    return PipelineLoggerAdapter(logging.getLogger(name), {"pipeline": pipeline})


def setup_logging(level: Optional[str] = None):
    """
    Configure application logging.

    Progress is reported on stdout only; there is no structured sink.
    """
    level_name = (level or settings.LOG_LEVEL).upper()
    log_level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )

    # Driver and client chatter
    for noisy in ("sqlalchemy.engine", "sqlalchemy.pool", "httpx", "httpcore", "asyncio"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(f"Logging configured at {level_name} level")
