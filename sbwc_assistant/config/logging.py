"""Logging setup for the SBWC assistant.

All package loggers hang off ``sbwc_assistant``; modules obtain theirs with
``logging.getLogger(__name__)``. Output goes to stderr so the CLI can stream
answers on stdout without interleaving log lines.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any

ROOT_LOGGER = "sbwc_assistant"

# SDK loggers that are chatty at INFO (per-request HTTP lines, retries)
NOISY_LOGGERS = ("httpx", "httpcore", "urllib3", "botocore", "qdrant_client", "google_genai")

PLAIN_FORMAT = "%(asctime)s | %(levelname)-8s | %(module)s:%(funcName)s | %(message)s"

# LogRecord attributes that are not caller-supplied ``extra`` fields
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys() | {"message", "asctime"}
)


class JSONExceptionFormatter(logging.Formatter):
    """One JSON object per record, carrying ``extra`` fields and exception details."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": {
                "file": record.filename,
                "function": record.funcName,
                "line": record.lineno,
            },
        }

        extra = {k: v for k, v in record.__dict__.items() if k not in _RESERVED_ATTRS}
        if extra:
            entry["extra"] = extra

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, _ = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value) if exc_value else None,
                "traceback": self.formatException(record.exc_info),
            }

        return json.dumps(entry, default=str)


def _build_formatter(json_format: bool) -> logging.Formatter:
    if json_format:
        return JSONExceptionFormatter()
    return logging.Formatter(PLAIN_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")


def setup_logging(
    level: str = "INFO",
    log_file: Path | None = None,
    json_format: bool = False,
) -> logging.Logger:
    """Configure the package logger.

    Safe to call more than once; previous handlers are replaced.

    Args:
        level: Level name for package loggers (DEBUG, INFO, ...).
        log_file: Also write records to this file when set.
        json_format: Emit JSON records instead of the plain format.

    Returns:
        The ``sbwc_assistant`` logger.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    formatter = _build_formatter(json_format)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    package_logger = logging.getLogger(ROOT_LOGGER)
    package_logger.setLevel(numeric_level)
    package_logger.handlers.clear()
    for handler in handlers:
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)

    sdk_level = logging.DEBUG if numeric_level <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(sdk_level)

    return package_logger


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the package logger or one of its children."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}" if name else ROOT_LOGGER)
