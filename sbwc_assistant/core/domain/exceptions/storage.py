"""Object storage exceptions for the SBWC assistant."""

from typing import Any

from .base import AssistantError


class StorageError(AssistantError):
    """Signing service reported an error."""

    error_code = "SBWC_STO_001"


class CitationMintError(AssistantError):
    """A signed URL could not be minted for one cited document.

    Never propagates: the resolver records it on that document's citation.
    ``reason`` is ``provider_error`` (the signer failed) or ``no_url``
    (the signer succeeded without returning a URL).
    """

    error_code = "SBWC_STO_002"

    PROVIDER_ERROR = "provider_error"
    NO_URL = "no_url"

    def __init__(
        self,
        message: str,
        *,
        reason: str = PROVIDER_ERROR,
        cause: Exception | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, cause=cause, context=context)
        self.reason = reason
