"""Logging setup for the command line."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

# Syslog priorities (0 emergency .. 7 debug) as used by `--log` and `loglevel`.
_PRIORITY_LEVELS = {
    1: logging.CRITICAL,
    2: logging.CRITICAL,
    3: logging.ERROR,
    4: logging.WARNING,
    5: logging.INFO,
    6: logging.INFO,
    7: logging.DEBUG,
}


def priority_to_level(priority: int) -> int:
    """
    Map a syslog priority to a logging level. Priority 0 (or below) silences
    everything; anything above 7 means full debug.
    """
    if priority <= 0:
        return logging.CRITICAL + 10
    return _PRIORITY_LEVELS.get(priority, logging.DEBUG)


def setup_logging(priority: int, stream: TextIO | None = None) -> logging.Logger:
    """Route `wpbundler` log records to `stream` (stderr by default)."""
    logger = logging.getLogger("wpbundler")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(priority_to_level(priority))
    return logger
