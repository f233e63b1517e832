"""
Logging configuration.

Configures loguru logger for the API process and the workers.
Sets up log rotation and retention policies.
"""

import sys

from loguru import logger

from app.config.settings import Settings


def setup_logging(settings: Settings) -> None:
    """Configure logger with a stderr sink and file rotation."""
    logger.remove()
    logger.add(sys.stderr, level=settings.log_level, backtrace=settings.debug)

    if settings.log_file:
        logger.add(
            settings.log_file,
            rotation="1 day",
            retention="7 days",
            level=settings.log_level,
            encoding="utf-8",
        )
