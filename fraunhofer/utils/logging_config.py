"""
Loguru sinks for fraunhofer runs.

Console lines are colourized; the optional run log gets the same fields as
plain text and rotates once it grows past ``ROTATION``.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Optional

from loguru import logger


ROTATION = "10 MB"
RETENTION = "7 days"


def log_format(show_time: bool = True, show_level: bool = True) -> str:
    """Loguru format string with optional timestamp and level columns.

    >>> log_format(show_time=False, show_level=False)
    '<level>{message}</level>'
    """
    columns = []
    if show_time:
        columns.append("<green>{time:YYYY-MM-DD HH:mm:ss}</green>")
    if show_level:
        columns.append("<level>{level: <8}</level>")
    columns.append("<level>{message}</level>")
    return " | ".join(columns)


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    show_time: bool = True,
    show_level: bool = True,
) -> Any:
    """
    Replace all loguru sinks with the fraunhofer console (and file) sinks.

    Parameters
    ----------
    level : str, default="INFO"
        Minimum level for every sink: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file : Path | None, default=None
        Run log written alongside the console output
    show_time : bool, default=True
        Prefix lines with a timestamp (``--no-log-time`` clears it)
    show_level : bool, default=True
        Prefix lines with the level name (``--no-log-level`` clears it)

    Returns
    -------
    logger
        The configured loguru logger
    """
    logger.remove()
    fmt = log_format(show_time, show_level)

    logger.add(sys.stderr, format=fmt, level=level, colorize=True)
    if log_file:
        logger.add(log_file, format=fmt, level=level, rotation=ROTATION, retention=RETENTION)

    return logger
