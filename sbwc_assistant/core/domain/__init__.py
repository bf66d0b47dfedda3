"""Domain models for the SBWC assistant.

Every model here is request-scoped: built fresh per chat request and never
shared between requests.

- document: SearchQuery and DocumentMatch from the vector store
- citation: Citation records returned to the caller
- chat: ChatMessage, AnswerStream and ChatResponse

    from sbwc_assistant.core.domain import Citation, DocumentMatch
"""

from .chat import (
    AnswerStream,
    ChatMessage,
    ChatResponse,
    ChatState,
    StreamEvent,
    StreamEventKind,
)
from .citation import Citation
from .document import (
    DEFAULT_MATCH_COUNT,
    DEFAULT_MATCH_THRESHOLD,
    DocumentMatch,
    SearchQuery,
    format_relevance,
)

__all__ = [
    # Document models
    "DEFAULT_MATCH_COUNT",
    "DEFAULT_MATCH_THRESHOLD",
    "DocumentMatch",
    "SearchQuery",
    "format_relevance",
    # Citation models
    "Citation",
    # Chat models
    "AnswerStream",
    "ChatMessage",
    "ChatResponse",
    "ChatState",
    "StreamEvent",
    "StreamEventKind",
]
