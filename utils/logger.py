"""
utils/logger.py
---------------
Storefront logging setup.

Modules call `get_logger(__name__)`; the first call installs one stdout
handler on the root logger at LOG_LEVEL. Hosts and the maintenance CLI may
call `configure_logging` again to change the level; the handler is reused,
never duplicated. Driver loggers are held at WARNING so pool and cursor
debug output does not drown storefront messages.
"""

import logging
import sys
from typing import Optional, TextIO

from config import LOG_LEVEL

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_QUIET_LIBRARIES = ("psycopg2", "openpyxl")

_handler: Optional[logging.Handler] = None


def _resolve_level(level) -> Optional[int]:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    return resolved if isinstance(resolved, int) else None


def configure_logging(level=None, stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Install (or retune) the storefront handler on the root logger.

    Args:
        level: Level name or number; defaults to LOG_LEVEL. Unknown names fall back to INFO.
        stream: Where records go; defaults to stdout. Replaces the current stream.

    Returns:
        The root logger.
    """
    global _handler
    root = logging.getLogger()
    if _handler is None:
        _handler = logging.StreamHandler(stream or sys.stdout)
        _handler.setFormatter(logging.Formatter(_LOG_FORMAT, _DATE_FORMAT))
        root.addHandler(_handler)
    elif stream is not None:
        _handler.setStream(stream)

    requested = LOG_LEVEL if level is None else level
    resolved = _resolve_level(requested)
    root.setLevel(logging.INFO if resolved is None else resolved)
    for name in _QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)
    if resolved is None:
        root.warning(f"Unknown log level {requested!r}; using INFO")
    return root


def get_logger(name: str) -> logging.Logger:
    """A named logger; sets up the storefront handler on first use."""
    if _handler is None:
        configure_logging()
    return logging.getLogger(name)
