"""Custom exception hierarchy for the SBWC assistant.

Each exception includes an error code, the location it was raised from,
the chained cause and a JSON-serializable form for structured logging.

    from sbwc_assistant.core.domain.exceptions import AssistantError, SearchError
"""

# Base classes
from .base import AssistantError, ExceptionContext

# Configuration exceptions
from .configuration import ConfigurationError, MissingAPIKeyError

# Embedding exceptions
from .embedding import (
    EmbeddingAPIError,
    EmbeddingDimensionError,
    EmbeddingError,
    EmbeddingRateLimitError,
)

# LLM exceptions
from .llm import LLMError, StreamError

# Search exceptions
from .search import SearchError

# Storage exceptions
from .storage import CitationMintError, StorageError

# Validation exceptions
from .validation import InvalidInputError

__all__ = [
    # Base
    "ExceptionContext",
    "AssistantError",
    # Configuration
    "ConfigurationError",
    "MissingAPIKeyError",
    # Embedding
    "EmbeddingError",
    "EmbeddingAPIError",
    "EmbeddingRateLimitError",
    "EmbeddingDimensionError",
    # Search
    "SearchError",
    # Storage
    "StorageError",
    "CitationMintError",
    # LLM
    "LLMError",
    "StreamError",
    # Validation
    "InvalidInputError",
]
