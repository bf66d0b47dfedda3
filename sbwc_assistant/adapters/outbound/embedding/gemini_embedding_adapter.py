"""Gemini embedding adapter implementing the embedding port."""

import asyncio
import logging

import requests

from ....core.domain.exceptions import (
    EmbeddingAPIError,
    EmbeddingRateLimitError,
    MissingAPIKeyError,
)
from ....core.ports.embedding_port import EmbeddingPort

logger = logging.getLogger(__name__)

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
REQUEST_TIMEOUT = 8


class GeminiEmbeddingAdapter(EmbeddingPort):
    """Embeds text through the Gemini ``batchEmbedContents`` REST endpoint.

    Each call makes a single HTTP request. Retries belong to the
    EmbeddingService, so failures are raised rather than retried here.
    """

    def __init__(
        self,
        api_key: str,
        model_name: str = "models/gemini-embedding-001",
        timeout: float = REQUEST_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        if not api_key:
            raise MissingAPIKeyError(
                "Google API key not set. Set GOOGLE_API_KEY in your .env file."
            )
        self.api_key = api_key
        self.model_name = model_name
        self.timeout = timeout
        # requests.post opens a fresh session per call; a Session is not shared across threads
        self._http = session if session is not None else requests

    @property
    def api_url(self) -> str:
        return f"{GEMINI_API_BASE}/{self.model_name}:batchEmbedContents"

    async def embed_query(self, text: str, dimensions: int) -> list[float]:
        embeddings = await asyncio.to_thread(
            self._embed_texts, [text], dimensions, "RETRIEVAL_QUERY"
        )
        return embeddings[0]

    async def embed_documents(self, texts: list[str], dimensions: int) -> list[list[float]]:
        if not texts:
            return []
        return await asyncio.to_thread(self._embed_texts, texts, dimensions, "RETRIEVAL_DOCUMENT")

    def _embed_texts(self, texts: list[str], dimensions: int, task_type: str) -> list[list[float]]:
        payload = {
            "requests": [
                {
                    "model": self.model_name,
                    "content": {"parts": [{"text": text}]},
                    "taskType": task_type,
                    "outputDimensionality": dimensions,
                }
                for text in texts
            ]
        }

        try:
            response = self._http.post(
                self.api_url,
                params={"key": self.api_key},
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise EmbeddingAPIError(f"Embedding request failed: {e}", cause=e) from e

        if response.status_code == 429:
            raise EmbeddingRateLimitError(
                "Embedding API rate limit exceeded", context={"status": response.status_code}
            )
        if response.status_code != 200:
            raise EmbeddingAPIError(
                f"Embedding API returned HTTP {response.status_code}",
                context={"status": response.status_code, "body": response.text[:500]},
            )

        data = response.json()
        embeddings = data.get("embeddings")
        if not embeddings:
            raise EmbeddingAPIError("No embedding returned from Gemini API")

        logger.debug("Embedded %d texts with %s", len(texts), self.model_name)
        return [emb.get("values", []) for emb in embeddings]
