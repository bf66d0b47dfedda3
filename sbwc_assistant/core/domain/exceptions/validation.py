"""Validation exceptions for the SBWC assistant."""

from .base import AssistantError


class InvalidInputError(AssistantError):
    """Caller input is malformed (empty history, blank query text, empty batch)."""

    error_code = "SBWC_VAL_001"
