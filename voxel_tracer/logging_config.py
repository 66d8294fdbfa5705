"""Console logging setup for scripts and renders."""

import logging
from typing import Optional

from .config import LOG_FORMAT, LOG_LEVEL


def setup_logging(
    level: Optional[str] = None,
    name: str = "voxel_tracer",
) -> logging.Logger:
    """
    Attach a console handler to the package logger.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL),
            ``LOG_LEVEL`` when omitted
        name: Logger to configure

    Returns:
        The configured logger
    """
    if level is None:
        level = LOG_LEVEL
    numeric = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(name)
    logger.setLevel(numeric)

    # Calling twice must not duplicate output.
    for handler in list(logger.handlers):
        if getattr(handler, "_voxel_tracer", False):
            logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(numeric)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    console_handler._voxel_tracer = True
    logger.addHandler(console_handler)

    return logger
