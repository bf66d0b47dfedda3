"""LLM exceptions for the SBWC assistant."""

from .base import AssistantError


class LLMError(AssistantError):
    """Base error for LLM operations.

    Common causes:
    - Invalid API key
    - Content filtered by safety settings
    - Service unavailable
    """

    error_code = "SBWC_LLM_001"


class StreamError(LLMError):
    """The answer stream failed after it was handed to the caller."""

    error_code = "SBWC_LLM_002"
