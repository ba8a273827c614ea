"""Logging setup.

Modules log through ``logging.getLogger(__name__)``; nothing is configured on
import. Applications (and the ingest script) call :func:`setup_logging` once
to attach a stream handler to the ``feedgate`` logger.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: str = "INFO", fmt: Optional[str] = None) -> logging.Logger:
    """Configure and return the package logger.

    Calling it again updates the level and format without stacking handlers.
    """

    log_level = getattr(logging, level.upper(), None)
    if not isinstance(log_level, int):
        raise ValueError(f"Unknown log level: {level}")

    logger = logging.getLogger("feedgate")
    logger.setLevel(log_level)

    formatter = logging.Formatter(fmt or DEFAULT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    handler = next((h for h in logger.handlers if getattr(h, "_feedgate", False)), None)
    if handler is None:
        handler = logging.StreamHandler(sys.stdout)
        handler._feedgate = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    handler.setLevel(log_level)
    handler.setFormatter(formatter)
    logger.propagate = False
    return logger


__all__ = ["DEFAULT_FORMAT", "setup_logging"]
