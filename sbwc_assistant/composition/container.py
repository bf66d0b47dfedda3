"""Composition root wiring adapters to the core services."""

from __future__ import annotations

import logging
from functools import lru_cache

from ..adapters.outbound.embedding.gemini_embedding_adapter import GeminiEmbeddingAdapter
from ..adapters.outbound.llm.gemini_chat_adapter import GeminiChatAdapter
from ..adapters.outbound.storage.s3_signer import S3UrlSigner
from ..adapters.outbound.vector_store.qdrant_adapter import QdrantSearchAdapter
from ..config.settings import settings
from ..core.services.chat_service import ChatService
from ..core.services.citation_service import CitationService
from ..core.services.embedding_service import EmbeddingService
from ..core.services.search_service import SearchService

logger = logging.getLogger(__name__)


@lru_cache
def get_embedding_service() -> EmbeddingService:
    logger.info("Initializing EmbeddingService...")
    provider = GeminiEmbeddingAdapter(
        api_key=settings.google_api_key,
        model_name=settings.embedding_model,
        timeout=settings.embedding_request_timeout_seconds,
    )
    return EmbeddingService(
        provider,
        dimensions=settings.embedding_dimensions,
        max_retries=settings.embedding_max_retries,
        base_delay=settings.embedding_retry_base_delay,
        batch_size=settings.embedding_batch_size,
    )


@lru_cache
def get_vector_store() -> QdrantSearchAdapter:
    logger.info("Initializing QdrantSearchAdapter (composition root)...")
    return QdrantSearchAdapter(
        url=settings.qdrant_url,
        api_key=settings.qdrant_api_key,
        collection_name=settings.qdrant_collection,
    )


@lru_cache
def get_url_signer() -> S3UrlSigner:
    """Build the signer on first use; construction errors reach the citation fallback."""
    logger.info("Initializing S3UrlSigner for bucket %s...", settings.storage_bucket)
    return S3UrlSigner(
        bucket=settings.storage_bucket,
        endpoint_url=settings.storage_endpoint_url,
        access_key_id=settings.storage_access_key_id,
        secret_access_key=settings.storage_secret_access_key,
        region_name=settings.storage_region,
    )


@lru_cache
def get_llm() -> GeminiChatAdapter:
    logger.info("Initializing GeminiChatAdapter...")
    return GeminiChatAdapter(api_key=settings.google_api_key, model=settings.llm_model)


@lru_cache
def get_chat_service() -> ChatService:
    logger.info("Initializing ChatService...")
    embedder = get_embedding_service()
    # every retry attempt must fit inside the embed deadline
    embed_timeout = max(
        settings.retrieval_timeout_seconds,
        embedder.retry_budget(settings.embedding_request_timeout_seconds),
    )
    return ChatService(
        embedder=embedder,
        searcher=SearchService(get_vector_store()),
        citations=CitationService(
            get_url_signer, max_concurrency=settings.citation_max_concurrency
        ),
        llm=get_llm(),
        match_threshold=settings.rag_match_threshold,
        match_count=settings.rag_match_count,
        url_expiry_seconds=settings.citation_url_expiry_seconds,
        retrieval_timeout=settings.retrieval_timeout_seconds,
        embed_timeout=embed_timeout,
        stream_timeout=settings.stream_timeout_seconds,
        temperature=settings.llm_temperature,
        max_tokens=settings.llm_max_tokens,
    )
