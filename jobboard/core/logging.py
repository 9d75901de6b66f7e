"""
Logging for the job board.

Every module asks get_logger(__name__) for its logger; the first call
attaches one stdout handler to the root logger at the configured level.
"""
from __future__ import annotations

import logging
import sys

from jobboard.core.config import get_settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"
_configured = False


def setup_logging(level_name: str = "INFO") -> None:
    """Attach a stdout handler to the root logger (once) and set its level."""
    global _configured
    level = getattr(logging, level_name.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    _configured = True

    if root.handlers:
        return

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    root.addHandler(console)


def get_logger(name: str) -> logging.Logger:
    """Return a named logger; configures root handlers on first call."""
    if not _configured:
        setup_logging(get_settings().log_level)
    return logging.getLogger(name)
