"""Embedding exceptions for the SBWC assistant."""

from .base import AssistantError


class EmbeddingError(AssistantError):
    """Failed to generate embeddings.

    Raised once retries are exhausted or the provider returned a
    malformed response. Fatal for the chat request.
    """

    error_code = "SBWC_EMB_001"


class EmbeddingAPIError(EmbeddingError):
    """Embedding API returned an error. Treated as transient."""

    error_code = "SBWC_EMB_002"


class EmbeddingRateLimitError(EmbeddingAPIError):
    """Embedding API rate limit exceeded."""

    error_code = "SBWC_EMB_003"


class EmbeddingDimensionError(EmbeddingError):
    """Returned vector does not have the configured dimensionality.

    Never retried.
    """

    error_code = "SBWC_EMB_004"
