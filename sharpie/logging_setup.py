"""Logging configuration for sharpie.

Handlers are attached to the ``sharpie`` package logger, not the root logger,
so embedding hosts keep control of their own logging. Adds a ``TRACE`` level
below ``DEBUG`` and accepts ``FATAL``/``WARN`` as level names.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path

from platformdirs import user_log_dir

TRACE_LEVEL = 5
logging.addLevelName(TRACE_LEVEL, "TRACE")

PACKAGE_LOGGER = "sharpie"
DEFAULT_MAX_BYTES = 10 * 1024 * 1024
DEFAULT_LOG_PATH = Path(user_log_dir("sharpie", appauthor=False)) / "sharpie.log"
TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_LEVEL_ALIASES = {
    "TRACE": TRACE_LEVEL,
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "FATAL": logging.CRITICAL,
    "CRITICAL": logging.CRITICAL,
}


def trace(logger: logging.Logger, message: str, *args, **kwargs) -> None:
    if logger.isEnabledFor(TRACE_LEVEL):
        logger.log(TRACE_LEVEL, message, *args, **kwargs)


def parse_level(value: str | int | None, default: int = logging.INFO) -> int:
    """Map a level name or number onto a ``logging`` level."""
    if value is None:
        return default
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    return _LEVEL_ALIASES.get(str(value).strip().upper(), default)


class JsonFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "component": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.lineno}",
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def configure_logging(
    level: str | int | None = None,
    log_file: str | Path | None = None,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = 1,
    fmt: str = "default",
    console: bool = True,
) -> logging.Logger:
    """Install handlers on the ``sharpie`` logger and return it.

    Calling this again replaces previously installed handlers. ``log_file``
    enables a size-capped rotating file; ``fmt="json"`` switches the file
    handler to structured records.
    """
    numeric_level = parse_level(level)
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
        logger.addHandler(console_handler)

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(str(log_path), maxBytes=max_bytes, backupCount=backup_count)
        file_handler.setFormatter(JsonFormatter() if fmt == "json" else logging.Formatter(TEXT_FORMAT))
        logger.addHandler(file_handler)

    if not logger.handlers:
        logger.addHandler(logging.NullHandler())

    logger.setLevel(numeric_level)
    logger.propagate = False
    logger.debug("Logging configured at %s", logging.getLevelName(numeric_level))
    return logger
