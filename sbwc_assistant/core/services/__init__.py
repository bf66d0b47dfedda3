"""Core services: embedding, search, context building, citations and chat."""

from .chat_service import ChatService
from .citation_service import CitationService
from .context_builder import NO_CONTEXT, build_context, build_sources_line, build_system_prompt
from .embedding_service import EmbeddingService, estimate_token_count
from .search_service import SearchService, filter_by_threshold, group_by_document

__all__ = [
    "ChatService",
    "CitationService",
    "EmbeddingService",
    "SearchService",
    "NO_CONTEXT",
    "build_context",
    "build_sources_line",
    "build_system_prompt",
    "estimate_token_count",
    "filter_by_threshold",
    "group_by_document",
]
