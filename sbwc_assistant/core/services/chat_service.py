"""Chat orchestration: embed, search, cite, then stream the answer."""

import asyncio
import logging
import time
from collections.abc import Mapping, Sequence
from typing import Any

from ..domain import (
    DEFAULT_MATCH_COUNT,
    DEFAULT_MATCH_THRESHOLD,
    AnswerStream,
    ChatMessage,
    ChatResponse,
    ChatState,
    DocumentMatch,
)
from ..domain.exceptions import (
    EmbeddingError,
    InvalidInputError,
    SearchError,
    StreamError,
)
from ..ports.llm_port import LLMPort
from .citation_service import DEFAULT_URL_EXPIRY_SECONDS, CitationService
from .context_builder import build_context, build_sources_line, build_system_prompt
from .embedding_service import EmbeddingService
from .search_service import SearchService

logger = logging.getLogger(__name__)


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000


class ChatService:
    """Answers a conversation with retrieved context and document citations.

    ``chat`` always returns a ChatResponse. Failures before streaming starts
    yield an already-failed stream and no citations; failures while
    streaming mark the stream failed and leave the citations intact.
    """

    def __init__(
        self,
        embedder: EmbeddingService,
        searcher: SearchService,
        citations: CitationService,
        llm: LLMPort,
        *,
        match_threshold: float = DEFAULT_MATCH_THRESHOLD,
        match_count: int = DEFAULT_MATCH_COUNT,
        url_expiry_seconds: int = DEFAULT_URL_EXPIRY_SECONDS,
        retrieval_timeout: float | None = 30.0,
        embed_timeout: float | None = None,
        stream_timeout: float | None = 120.0,
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ) -> None:
        """Initialize the chat service.

        Args:
            embedder: Embedding client for the user's query.
            searcher: Vector search gateway.
            citations: Citation resolver.
            llm: Streaming LLM provider.
            match_threshold: Similarity floor for vector search.
            match_count: Maximum matches fed to the prompt.
            url_expiry_seconds: Lifetime of citation URLs.
            retrieval_timeout: Seconds allowed for vector search, and for embedding
                when ``embed_timeout`` is not given.
            embed_timeout: Seconds allowed for embedding including every retry;
                see :meth:`EmbeddingService.retry_budget`.
            stream_timeout: Seconds allowed for the whole LLM stream.
            temperature: LLM sampling temperature.
            max_tokens: LLM output token limit.
        """
        self.embedder = embedder
        self.searcher = searcher
        self.citations = citations
        self.llm = llm
        self.match_threshold = match_threshold
        self.match_count = match_count
        self.url_expiry_seconds = url_expiry_seconds
        self.retrieval_timeout = retrieval_timeout
        self.embed_timeout = embed_timeout if embed_timeout is not None else retrieval_timeout
        self.stream_timeout = stream_timeout
        self.temperature = temperature
        self.max_tokens = max_tokens

    @staticmethod
    def validate(messages: Sequence[ChatMessage | Mapping[str, Any]] | None) -> list[ChatMessage]:
        """Normalize the history and require a non-empty last message."""
        if not messages:
            raise InvalidInputError("No messages provided")

        history = [ChatMessage.from_any(m) for m in messages]
        if not history[-1].content.strip():
            raise InvalidInputError("Invalid message format", context={"reason": "empty content"})
        return history

    async def _embed(self, text: str) -> list[float]:
        started = time.perf_counter()
        try:
            async with asyncio.timeout(self.embed_timeout):
                vector = await self.embedder.embed(text)
        except TimeoutError as e:
            raise EmbeddingError(
                f"Embedding timed out after {self.embed_timeout}s", cause=e
            ) from e
        logger.info("Embedded query in %.0fms", _elapsed_ms(started))
        return vector

    async def _search(self, vector: list[float]) -> list[DocumentMatch]:
        started = time.perf_counter()
        try:
            async with asyncio.timeout(self.retrieval_timeout):
                matches = await self.searcher.search(
                    vector,
                    threshold=self.match_threshold,
                    limit=self.match_count,
                    allowed_document_ids=None,
                )
        except TimeoutError as e:
            raise SearchError(
                f"Vector search timed out after {self.retrieval_timeout}s", cause=e
            ) from e
        logger.info(
            "Vector search returned %d matches in %.0fms", len(matches), _elapsed_ms(started)
        )
        return matches

    async def chat(self, messages: Sequence[ChatMessage | Mapping[str, Any]] | None) -> ChatResponse:
        """Run one chat request.

        Args:
            messages: Conversation history; the last entry is the query.

        Returns:
            ChatResponse whose stream yields the answer and whose citations
            list the documents consulted.
        """
        try:
            history = self.validate(messages)
            query = history[-1].content
            vector = await self._embed(query)
            matches = await self._search(vector)
        except (InvalidInputError, EmbeddingError, SearchError) as e:
            state = ChatState.for_error(e)
            logger.error("Chat request failed before streaming (%s): %s", state.value, e.message)
            return ChatResponse.failed(e, state)

        citations = await self.citations.resolve(matches, self.url_expiry_seconds)

        system_prompt = build_system_prompt(build_context(matches), build_sources_line(matches))
        model_messages = [ChatMessage(role="system", content=system_prompt), *history]

        stream = AnswerStream()
        # TODO: cancel the producer task when the caller stops consuming the stream
        task = asyncio.create_task(self._produce(stream, model_messages))
        stream.attach_producer(task)

        return ChatResponse(stream=stream, citations=citations)

    async def _produce(self, stream: AnswerStream, model_messages: list[ChatMessage]) -> None:
        started = time.perf_counter()
        chunks = 0
        try:
            async with asyncio.timeout(self.stream_timeout):
                async for chunk in self.llm.stream_chat(
                    model_messages,
                    temperature=self.temperature,
                    max_tokens=self.max_tokens,
                ):
                    stream.push(chunk)
                    chunks += 1
        except Exception as e:
            message = str(e) or "Streaming failed"
            if isinstance(e, TimeoutError):
                message = f"Streaming timed out after {self.stream_timeout}s"
            logger.error("Streaming error: %s", message)
            stream.fail(StreamError(message, cause=e))
            return

        logger.info("Streamed %d chunks in %.0fms", chunks, _elapsed_ms(started))
        stream.close()
