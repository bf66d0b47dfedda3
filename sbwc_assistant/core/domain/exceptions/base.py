"""Base exception for the SBWC assistant.

Every assistant exception records an error code, where it was raised, the
underlying cause and any debugging context, and renders all of it as a
JSON-ready dictionary for logs, the API and the CLI.
"""

import inspect
import traceback
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import PurePath
from types import FrameType
from typing import Any


@dataclass
class ExceptionContext:
    """Raise-site location of an exception."""

    class_name: str
    method_name: str
    file_name: str
    line_number: int
    timestamp: str = field(default_factory=lambda: datetime.now(UTC).isoformat())

    @classmethod
    def from_frame(cls, frame: FrameType | None) -> "ExceptionContext":
        if frame is None:
            return cls("<unknown>", "<unknown>", "<unknown>", 0)
        owner = frame.f_locals.get("self")
        return cls(
            class_name=type(owner).__name__ if owner is not None else "<module>",
            method_name=frame.f_code.co_name,
            file_name=PurePath(frame.f_code.co_filename.replace("\\", "/")).name,
            line_number=frame.f_lineno,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "class": self.class_name,
            "method": self.method_name,
            "file": self.file_name,
            "line": self.line_number,
            "timestamp": self.timestamp,
        }


def _raise_site(exc: BaseException) -> FrameType | None:
    """First frame outside the constructors of ``exc``."""
    frame = inspect.currentframe()
    # this helper, then _capture_location
    for _ in range(2):
        frame = frame.f_back if frame else None
    while frame and frame.f_back and frame.f_locals.get("self") is exc:
        frame = frame.f_back
    return frame


class AssistantError(Exception):
    """Base exception for all assistant errors.

    Example:
        try:
            await client.query_points(...)
        except Exception as e:
            raise SearchError(
                f"Vector search failed: {e}",
                cause=e,
                context={"collection": collection_name},
            ) from e
    """

    error_code: str = "SBWC_ERR_001"

    def __init__(
        self,
        message: str,
        *,
        cause: Exception | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message.
            cause: The underlying exception that caused this error.
            context: Extra key-value pairs for debugging.
        """
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.extra_context = dict(context or {})
        self.location = self._capture_location()
        self.stack_trace = self._format_cause_trace(cause)

    def _capture_location(self) -> ExceptionContext:
        return ExceptionContext.from_frame(_raise_site(self))

    @staticmethod
    def _format_cause_trace(cause: Exception | None) -> str | None:
        if cause is None:
            return None
        return "".join(traceback.format_exception(type(cause), cause, cause.__traceback__))

    def to_dict(self, include_trace: bool = False) -> dict[str, Any]:
        """Render as ``{error, location, context?, cause?, stack_trace?}``.

        Args:
            include_trace: Add the cause's formatted traceback (debug mode).
        """
        payload: dict[str, Any] = {
            "error": {
                "type": type(self).__name__,
                "code": self.error_code,
                "message": self.message,
            },
            "location": self.location.to_dict(),
        }
        if self.extra_context:
            payload["context"] = dict(self.extra_context)
        if self.cause is not None:
            payload["cause"] = {"type": type(self.cause).__name__, "message": str(self.cause)}
        if include_trace and self.stack_trace:
            payload["stack_trace"] = [ln for ln in self.stack_trace.splitlines() if ln.strip()]
        return payload
