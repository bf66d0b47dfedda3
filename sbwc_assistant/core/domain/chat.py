"""Chat message, answer stream and response models."""

import asyncio
import logging
from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .citation import Citation
from .exceptions import (
    AssistantError,
    EmbeddingError,
    InvalidInputError,
    SearchError,
    StreamError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChatMessage:
    """A single message in the conversation history."""

    role: str
    content: str

    @classmethod
    def from_any(cls, message: "ChatMessage | Mapping[str, Any]") -> "ChatMessage":
        """Accept either a ChatMessage or a ``{"role", "content"}`` mapping."""
        if isinstance(message, ChatMessage):
            return message
        if not isinstance(message, Mapping):
            raise InvalidInputError(
                "Invalid message format", context={"type": type(message).__name__}
            )
        role = str(message.get("role") or "user")
        content = message.get("content")
        return cls(role=role, content="" if content is None else str(content))


class ChatState(str, Enum):
    """Lifecycle of one chat request as seen through its answer stream."""

    STREAMING = "streaming"
    COMPLETED = "completed"
    FAILED = "failed"
    VALIDATION_FAILED = "validation_failed"
    EMBED_FAILED = "embed_failed"
    SEARCH_FAILED = "search_failed"

    @property
    def is_terminal(self) -> bool:
        return self is not ChatState.STREAMING

    @classmethod
    def for_error(cls, error: Exception) -> "ChatState":
        """State a request terminates in when ``error`` stops it."""
        if isinstance(error, InvalidInputError):
            return cls.VALIDATION_FAILED
        if isinstance(error, EmbeddingError):
            return cls.EMBED_FAILED
        if isinstance(error, SearchError):
            return cls.SEARCH_FAILED
        return cls.FAILED


class StreamEventKind(str, Enum):
    TOKEN = "token"
    DONE = "done"
    ERROR = "error"


@dataclass(frozen=True)
class StreamEvent:
    """One item on the answer channel: a token or a terminal signal."""

    kind: StreamEventKind
    text: str = ""


class AnswerStream:
    """Single-consumer channel carrying answer tokens from a producer task.

    The producer calls :meth:`push` for each token and finishes with exactly
    one terminal signal, :meth:`close` or :meth:`fail`. Later terminal
    signals are ignored. The consumer pulls with :meth:`events` or plain
    ``async for`` iteration, which yields text and raises
    :class:`StreamError` if the stream failed. Tokens are delivered once;
    reading a drained stream again yields only its terminal event.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[StreamEvent] = asyncio.Queue()
        self._state = ChatState.STREAMING
        self._error: AssistantError | None = None
        self._producer: asyncio.Task | None = None

    @classmethod
    def failed(cls, error: AssistantError, state: ChatState = ChatState.FAILED) -> "AnswerStream":
        """Create a stream that is already terminated with ``error``."""
        stream = cls()
        stream.fail(error, state=state)
        return stream

    @property
    def state(self) -> ChatState:
        return self._state

    @property
    def error(self) -> AssistantError | None:
        return self._error

    @property
    def is_done(self) -> bool:
        return self._state.is_terminal

    def attach_producer(self, task: asyncio.Task) -> None:
        """Hold a reference to the task feeding this stream."""
        self._producer = task

    def push(self, text: str) -> None:
        if self.is_done:
            logger.debug("Dropping token pushed after stream terminated")
            return
        if text:
            self._queue.put_nowait(StreamEvent(StreamEventKind.TOKEN, text))

    def close(self) -> None:
        if self.is_done:
            return
        self._state = ChatState.COMPLETED
        self._queue.put_nowait(StreamEvent(StreamEventKind.DONE))

    def fail(self, error: AssistantError, state: ChatState = ChatState.FAILED) -> None:
        if self.is_done:
            return
        self._state = state
        self._error = error
        self._queue.put_nowait(StreamEvent(StreamEventKind.ERROR, error.message))

    async def events(self) -> AsyncIterator[StreamEvent]:
        """Yield events until and including the terminal one."""
        while True:
            event = await self._queue.get()
            if event.kind is StreamEventKind.TOKEN:
                yield event
                continue
            # leave the terminal event for any later reader
            self._queue.put_nowait(event)
            yield event
            return

    async def __aiter__(self) -> AsyncIterator[str]:
        async for event in self.events():
            if event.kind is StreamEventKind.TOKEN:
                yield event.text
            elif event.kind is StreamEventKind.ERROR:
                if isinstance(self._error, StreamError):
                    raise self._error
                raise StreamError(event.text, cause=self._error)

    async def collect(self) -> str:
        """Consume the whole stream and return the concatenated answer."""
        return "".join([chunk async for chunk in self])


@dataclass
class ChatResponse:
    """The ``{stream, citations}`` shape returned by every chat call."""

    stream: AnswerStream
    citations: list[Citation] = field(default_factory=list)

    @classmethod
    def failed(cls, error: AssistantError, state: ChatState) -> "ChatResponse":
        return cls(stream=AnswerStream.failed(error, state=state), citations=[])

    @property
    def state(self) -> ChatState:
        return self.stream.state
