"""Logging helpers for the batchrun package.

The library never installs handlers on its own. ``setup_logger`` is opt-in and
only replaces handlers that it added earlier, so handlers configured by the
host application stay in place.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path


ROOT_LOGGER = "batchrun"
DEFAULT_FORMAT = "[%(asctime)s] [%(name)s] [%(levelname)s] %(message)s"

_OWNED_ATTR = "_batchrun_owned"


def _owned(handler: logging.Handler) -> logging.Handler:
    setattr(handler, _OWNED_ATTR, True)
    return handler


def setup_logger(level: int | str = logging.INFO, log_file: Path | None = None) -> logging.Logger:
    """Attach a console handler (and a file handler if ``log_file``) to the package logger.

    Calling it again swaps the previously attached handlers instead of stacking them.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)

    for handler in [h for h in logger.handlers if getattr(h, _OWNED_ATTR, False)]:
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(DEFAULT_FORMAT, datefmt="%H:%M:%S")
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(_owned(handler))
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the package namespace; handlers are left to the application."""
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
