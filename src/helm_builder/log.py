"""Logging setup.

The builder logs through loguru. Subprocess invocations are traced at DEBUG
level, so they only appear in the CI log when ``DEBUG`` is enabled.
"""

import sys

from loguru import logger

LOG_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <7}</level> | {message}"


def configure_logging(debug: bool = False) -> None:
    """Replace loguru's default sink with a stderr sink at the right level."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if debug else "INFO", format=LOG_FORMAT)
