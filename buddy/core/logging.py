"""Logging configuration for the API server.

Level comes from the LOG_LEVEL setting (default INFO).
"""

import logging
import sys

from buddy.core.config import settings

LOG_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def get_log_level() -> int:
    """Logging level constant for the configured LOG_LEVEL (default: INFO)."""
    return LOG_LEVEL_MAP.get(settings.log_level.upper(), logging.INFO)


def setup_logging() -> None:
    """Configure the root logger to write to stdout."""
    formatter = logging.Formatter(
        fmt="[%(asctime)s] %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    log_level = get_log_level()

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove any existing handlers to avoid duplicates
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    # SQL echo is controlled by DEBUG, keep it out of INFO output otherwise
    if not settings.debug:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
