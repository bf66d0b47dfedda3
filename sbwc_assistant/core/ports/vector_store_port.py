"""Vector Store Port Interface."""

from abc import ABC, abstractmethod
from collections.abc import Collection

from ..domain import DocumentMatch


class VectorStorePort(ABC):
    """Abstract interface for the section-matching vector store RPC."""

    @abstractmethod
    async def search(
        self,
        vector: list[float],
        threshold: float,
        limit: int,
        allowed_document_ids: Collection[str] | None = None,
    ) -> list[DocumentMatch]:
        """Return section matches joined with their document's name and storage path.

        Rows come back sorted by descending similarity.
        """
        ...
