"""Port interfaces the core services depend on."""

from .embedding_port import EmbeddingPort
from .llm_port import LLMPort
from .storage_port import UrlSignerPort
from .vector_store_port import VectorStorePort

__all__ = [
    "EmbeddingPort",
    "LLMPort",
    "UrlSignerPort",
    "VectorStorePort",
]
