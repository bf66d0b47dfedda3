"""Gemini streaming chat adapter using the google-genai SDK."""

import logging
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING

from ....core.domain import ChatMessage
from ....core.domain.exceptions import LLMError, MissingAPIKeyError
from ....core.ports.llm_port import LLMPort

if TYPE_CHECKING:
    from google import genai

logger = logging.getLogger(__name__)

ROLE_MAP = {"user": "user", "assistant": "model"}


class GeminiChatAdapter(LLMPort):
    """Streams chat completions from Gemini."""

    def __init__(self, api_key: str, model: str = "gemini-2.0-flash", client=None) -> None:
        """Initialize the Gemini adapter.

        Args:
            api_key: Google AI API key.
            model: Model to use.
            client: Preconfigured ``genai.Client``, mainly for tests.
        """
        self.api_key = api_key
        self.model_name = model
        self._client = client

    def _get_client(self) -> "genai.Client":
        """Lazy load the Gemini client."""
        if self._client is None:
            if not self.api_key:
                raise MissingAPIKeyError(
                    "Google API key not set. Set GOOGLE_API_KEY in your .env file."
                )

            from google import genai

            self._client = genai.Client(api_key=self.api_key)
            logger.info("Gemini client initialized for model: %s", self.model_name)

        return self._client

    @staticmethod
    def _split_messages(messages: list[ChatMessage]):
        """Separate system instructions from the turn-by-turn contents."""
        from google.genai import types

        system_parts = [m.content for m in messages if m.role == "system" and m.content]
        contents = [
            types.Content(role=ROLE_MAP.get(m.role, "user"), parts=[types.Part(text=m.content)])
            for m in messages
            if m.role != "system"
        ]
        system_instruction = "\n\n".join(system_parts) or None
        return system_instruction, contents

    async def stream_chat(
        self,
        messages: list[ChatMessage],
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ) -> AsyncIterator[str]:
        from google.genai.types import GenerateContentConfig

        client = self._get_client()
        system_instruction, contents = self._split_messages(messages)

        try:
            response = await client.aio.models.generate_content_stream(
                model=self.model_name,
                contents=contents,
                config=GenerateContentConfig(
                    system_instruction=system_instruction,
                    temperature=temperature,
                    max_output_tokens=max_tokens,
                ),
            )
            async for chunk in response:
                if chunk.text:
                    yield chunk.text
        except LLMError:
            raise
        except Exception as e:
            raise LLMError(f"Gemini streaming failed: {e}", cause=e) from e
