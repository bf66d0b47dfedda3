"""Object Storage Signing Port Interface."""

from abc import ABC, abstractmethod


class UrlSignerPort(ABC):
    """Abstract interface for minting time-limited object URLs."""

    @abstractmethod
    async def create_signed_url(self, locator: str, expires_in: int) -> str | None:
        """Mint a signed URL for ``locator`` valid for ``expires_in`` seconds.

        Returns ``None`` when the service succeeds without a URL and raises
        ``StorageError`` when it reports an error.
        """
        ...
