"""
Logging setup.

Configures loguru sinks for workers, scheduler and scripts.
"""

import sys

from loguru import logger

from transfer_sync.config.settings import settings


def setup_logging(component: str = "transfer_sync") -> None:
    """Configure stderr level and a rotating file sink."""
    logger.remove()
    logger.add(sys.stderr, level=settings.log_level)
    logger.add(
        settings.log_file,
        rotation="1 day",
        retention="7 days",
        level="INFO",
        encoding="utf-8",
    )

    logger.info(f"Starting {component} ({settings.environment})...")
