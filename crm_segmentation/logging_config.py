"""Structured logging setup for applications embedding the engine.

The library only emits events through ``structlog.get_logger``; calling
:func:`configure_logging` is left to the host application.
"""

from __future__ import annotations

import logging
import os
import sys

import structlog

LOG_LEVEL_ENV_VAR = "CRM_SEGMENTATION_LOG_LEVEL"


def configure_logging(level: str | None = None) -> None:
    """Render structlog events as JSON lines on stderr.

    Args:
        level: Log level name (e.g. "DEBUG"). Defaults to the
            CRM_SEGMENTATION_LOG_LEVEL environment variable, then INFO.

    Raises:
        ValueError: If the level name is not a standard logging level.
    """
    level_name = (level or os.getenv(LOG_LEVEL_ENV_VAR, "INFO")).upper()
    numeric_level = logging.getLevelName(level_name)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level_name}")

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=numeric_level,
    )

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )
