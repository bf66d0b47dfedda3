"""Embedding Port Interface."""

from abc import ABC, abstractmethod


class EmbeddingPort(ABC):
    """Abstract interface for embedding providers."""

    @abstractmethod
    async def embed_query(self, text: str, dimensions: int) -> list[float]: ...

    @abstractmethod
    async def embed_documents(self, texts: list[str], dimensions: int) -> list[list[float]]: ...
