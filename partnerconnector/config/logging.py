"""
Logging configuration.

Configures loguru sinks for the service layer and admin scripts.
Sets up log rotation and retention policies.
"""

import sys

from loguru import logger

from partnerconnector.config.settings import settings


def setup_logging(level: str | None = None) -> None:
    """
    Configure logger with stderr output and file rotation.

    Args:
        level: Override for settings.log_level
    """
    level = (level or settings.log_level).upper()

    logger.remove()
    logger.add(sys.stderr, level=level)

    if settings.log_file:
        logger.add(
            settings.log_file,
            rotation=settings.log_rotation,
            retention=settings.log_retention,
            level=level,
            encoding="utf-8",
        )

    logger.debug(
        "Logging configured",
        extra={"level": level, "log_file": settings.log_file},
    )
