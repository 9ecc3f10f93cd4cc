"""Logging setup shared by the docsite CLI and library modules."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "docsite"
_CONSOLE_FORMAT = "[docsite] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``docsite`` or one of its children (``docsite.<name>``)."""
    return logging.getLogger(f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME)


def _handler(handler: logging.Handler, level: int, fmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Send docsite records to stderr and, when ``log_file`` is given, to that file.

    Calling it again replaces the handlers installed by the previous call.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()

    logger.addHandler(_handler(logging.StreamHandler(), level, _CONSOLE_FORMAT))
    if log_file is not None:
        logger.addHandler(_handler(logging.FileHandler(log_file, encoding="utf-8"), level, _FILE_FORMAT))
    return logger


__all__ = ["configure_logging", "get_logger"]
