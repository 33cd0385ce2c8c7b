"""
Logging setup shared by the bot, the store and the balancer.

- Default: concise INFO-level lines.
- LOG_LEVEL=DEBUG (or setup_logging(level="DEBUG")) switches to a verbose
  format with module, line and function, and shows balancer search sizes and
  store reads/writes.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Literal, Optional

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

VERBOSE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(funcName)s | %(message)s"
CONCISE_FORMAT = "%(asctime)s %(levelname).1s %(name)s: %(message)s"


def resolve_level(level: Optional[str] = None) -> int:
    """Map an explicit level, or LOG_LEVEL, to a logging constant (INFO if unrecognised)."""
    name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    return _LEVELS.get(name, logging.INFO)


def setup_logging(level: Optional[LogLevel] = None, mode: Optional[Literal["test", "prod"]] = None) -> None:
    """Configure the root logger once; calling again replaces the handler."""
    numeric_level = resolve_level(level)

    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)

    is_debug = numeric_level <= logging.DEBUG
    fmt = VERBOSE_FORMAT if (mode == "test" or is_debug) else CONCISE_FORMAT

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(logging.Formatter(fmt=fmt, datefmt="%H:%M:%S"))

    root.setLevel(numeric_level)
    root.addHandler(handler)

    # discord.py and aiosqlite are chatty below WARNING
    for noisy in ("discord", "aiosqlite"):
        logging.getLogger(noisy).setLevel(logging.INFO if is_debug else logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
