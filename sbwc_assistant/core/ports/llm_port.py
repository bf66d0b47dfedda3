"""LLM Port Interface."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

from ..domain import ChatMessage


class LLMPort(ABC):
    """Abstract interface for streaming chat completion providers."""

    @abstractmethod
    def stream_chat(
        self,
        messages: list[ChatMessage],
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ) -> AsyncIterator[str]:
        """Stream the completion for ``messages`` as text increments."""
        ...
