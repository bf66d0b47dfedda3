"""Uniform rendering of exceptions for logs, HTTP responses and the CLI.

Assistant exceptions already know how to serialise themselves; anything
else is rendered into the same ``{error, location, context?, stack_trace?}``
shape from its traceback.
"""

import json
import logging
import traceback
from pathlib import PurePath
from typing import Any

from ...core.domain.exceptions import (
    AssistantError,
    ConfigurationError,
    EmbeddingError,
    EmbeddingRateLimitError,
    InvalidInputError,
    SearchError,
)

logger = logging.getLogger(__name__)

FOREIGN_ERROR_CODE = "PYTHON_ERR"

# First match wins, so subclasses precede their bases
_HTTP_STATUS_BY_TYPE = (
    (InvalidInputError, 400),
    (EmbeddingRateLimitError, 429),
    ((EmbeddingError, SearchError), 502),
    (ConfigurationError, 500),
    (AssistantError, 500),
    (ValueError, 400),
    ((ConnectionError, TimeoutError), 503),
)


def _foreign_location(exc: BaseException) -> dict[str, Any]:
    frames = traceback.extract_tb(exc.__traceback__) if exc.__traceback__ else []
    if not frames:
        return {"class": "<unknown>", "method": "<unknown>", "file": "<unknown>", "line": 0}
    last = frames[-1]
    return {
        "class": "<unknown>",
        "method": last.name,
        "file": PurePath(last.filename.replace("\\", "/")).name,
        "line": last.lineno or 0,
    }


def format_exception_json(
    exc: Exception,
    include_trace: bool = False,
    extra_context: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Render any exception as a JSON-ready dictionary.

    Args:
        exc: The exception to render.
        include_trace: Attach the formatted traceback.
        extra_context: Merged into the ``context`` section.
    """
    if isinstance(exc, AssistantError):
        payload = exc.to_dict(include_trace=include_trace)
    else:
        payload = {
            "error": {
                "type": type(exc).__name__,
                "code": FOREIGN_ERROR_CODE,
                "message": str(exc),
            },
            "location": _foreign_location(exc),
        }
        if include_trace:
            formatted = traceback.format_exception(type(exc), exc, exc.__traceback__)
            payload["stack_trace"] = [chunk.strip() for chunk in formatted if chunk.strip()]

    if extra_context:
        payload.setdefault("context", {}).update(extra_context)
    return payload


def get_error_code(exc: Exception) -> str:
    """``SBWC_*`` code for assistant errors, ``PYTHON_ERR`` for anything else."""
    return exc.error_code if isinstance(exc, AssistantError) else FOREIGN_ERROR_CODE


def get_http_status_code(exc: Exception) -> int:
    """HTTP status an exception should surface as (400, 429, 500, 502 or 503)."""
    for exc_types, status in _HTTP_STATUS_BY_TYPE:
        if isinstance(exc, exc_types):
            return status
    return 500


def log_exception(
    exc: Exception,
    log: logging.Logger | None = None,
    level: int | None = None,
    extra_context: dict[str, Any] | None = None,
) -> None:
    """Log an exception as structured JSON including its traceback.

    Args:
        exc: The exception to log.
        log: Logger to use (defaults to this module's).
        level: Log level; client errors (4xx) default to WARNING, the rest to ERROR.
        extra_context: Merged into the logged ``context``.
    """
    if level is None:
        level = logging.WARNING if get_http_status_code(exc) < 500 else logging.ERROR
    payload = format_exception_json(exc, include_trace=True, extra_context=extra_context)
    (log or logger).log(level, json.dumps(payload, indent=2, default=str))
