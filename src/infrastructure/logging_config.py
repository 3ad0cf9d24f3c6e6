from __future__ import annotations

import os
import sys

from loguru import logger

_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def configure_logging(level: str | None = None) -> None:
    """Replace loguru's default sink with a single stderr sink at ``LOG_LEVEL``."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=(level or os.getenv("LOG_LEVEL", "INFO")).upper(),
        format=_FORMAT,
        backtrace=False,
        diagnose=os.getenv("ENV", "development") == "development",
    )
