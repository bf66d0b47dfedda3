"""Vector search exceptions for the SBWC assistant."""

from .base import AssistantError


class SearchError(AssistantError):
    """Vector store RPC failed.

    Common causes:
    - Invalid URL or API key
    - Collection does not exist
    - Embedding dimension mismatch with the indexed vectors
    """

    error_code = "SBWC_SRC_001"
