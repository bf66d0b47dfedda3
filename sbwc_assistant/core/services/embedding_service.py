"""Embedding client with retry and exponential backoff."""

import asyncio
import logging
import math
from collections.abc import Awaitable, Callable

from ..domain.exceptions import EmbeddingDimensionError, EmbeddingError, InvalidInputError
from ..ports.embedding_port import EmbeddingPort

logger = logging.getLogger(__name__)

DEFAULT_DIMENSIONS = 1536
MAX_EMBEDDING_RETRIES = 3
RETRY_BASE_DELAY = 1.0
EMBEDDING_BATCH_SIZE = 100


def estimate_token_count(text: str) -> int:
    """Rough token estimate: one token per four characters."""
    return math.ceil(len(text) / 4)


class EmbeddingService:
    """Turns query text into fixed-length vectors.

    Transient provider failures are retried with exponential backoff.
    Input validation and dimensionality checks fail immediately.
    """

    def __init__(
        self,
        provider: EmbeddingPort,
        dimensions: int = DEFAULT_DIMENSIONS,
        max_retries: int = MAX_EMBEDDING_RETRIES,
        base_delay: float = RETRY_BASE_DELAY,
        batch_size: int = EMBEDDING_BATCH_SIZE,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize the embedding service.

        Args:
            provider: Embedding provider adapter.
            dimensions: Required vector length.
            max_retries: Total attempts per text or batch.
            base_delay: Delay in seconds before the second attempt; doubles after.
            batch_size: Default number of texts per provider call in batch mode.
            sleep: Awaitable used to wait between attempts.
        """
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        if batch_size < 1:
            raise ValueError("batch_size must be positive")
        self.provider = provider
        self.dimensions = dimensions
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.batch_size = batch_size
        self._sleep = sleep

    def _backoff_delay(self, attempt: int) -> float:
        return self.base_delay * (2 ** (attempt - 1))

    def retry_budget(self, attempt_timeout: float) -> float:
        """Worst-case seconds for one embed call when each attempt may take ``attempt_timeout``."""
        backoff = sum(self._backoff_delay(attempt) for attempt in range(1, self.max_retries))
        return self.max_retries * attempt_timeout + backoff

    def _check_dimensions(self, vector: list[float]) -> list[float]:
        if len(vector) != self.dimensions:
            raise EmbeddingDimensionError(
                f"Expected {self.dimensions} dimensions, got {len(vector)}",
                context={"expected": self.dimensions, "actual": len(vector)},
            )
        return vector

    async def _with_retries(self, label: str, call: Callable[[], Awaitable]):
        last_error: Exception | None = None

        for attempt in range(1, self.max_retries + 1):
            try:
                return await call()
            except (EmbeddingDimensionError, InvalidInputError):
                raise
            except Exception as e:
                last_error = e
                if attempt < self.max_retries:
                    delay = self._backoff_delay(attempt)
                    logger.warning(
                        "%s failed (attempt %d/%d), retrying in %.1fs: %s",
                        label,
                        attempt,
                        self.max_retries,
                        delay,
                        e,
                    )
                    await self._sleep(delay)

        raise EmbeddingError(
            f"Failed to generate {label.lower()} after {self.max_retries} attempts: {last_error}",
            cause=last_error,
            context={"attempts": self.max_retries},
        )

    async def embed(self, text: str) -> list[float]:
        """Generate an embedding vector for one query text.

        Args:
            text: Text to embed; surrounding whitespace is trimmed.

        Returns:
            Vector of exactly ``dimensions`` floats.

        Raises:
            InvalidInputError: If text is blank.
            EmbeddingDimensionError: If the provider returned the wrong length.
            EmbeddingError: If every attempt failed.
        """
        trimmed = (text or "").strip()
        if not trimmed:
            raise InvalidInputError("Cannot generate embedding for empty text")

        async def call() -> list[float]:
            vector = await self.provider.embed_query(trimmed, self.dimensions)
            if not vector:
                raise EmbeddingError("No embedding returned from provider")
            return self._check_dimensions(list(vector))

        return await self._with_retries("Embedding", call)

    async def embed_batch(
        self, texts: list[str], batch_size: int | None = None
    ) -> list[list[float]]:
        """Generate embeddings for many texts, preserving input order.

        Blank entries are dropped before batching, so the result has one
        vector per non-blank input. Each batch is retried independently.

        Args:
            texts: Non-empty list of texts.
            batch_size: Texts per provider call (defaults to the service setting).

        Returns:
            List of vectors in the order of the non-blank inputs.

        Raises:
            InvalidInputError: If ``texts`` is empty.
            EmbeddingError: If a batch fails on every attempt or returns a
                different number of vectors than it was sent.
        """
        if not texts:
            raise InvalidInputError("Cannot generate embeddings for an empty list")

        size = self.batch_size if batch_size is None else batch_size
        if size < 1:
            raise InvalidInputError("batch_size must be positive", context={"batch_size": size})

        cleaned = [t.strip() for t in texts if t and t.strip()]
        dropped = len(texts) - len(cleaned)
        if dropped:
            logger.debug("Dropped %d blank texts from embedding batch", dropped)

        embeddings: list[list[float]] = []
        for start in range(0, len(cleaned), size):
            batch = cleaned[start : start + size]

            async def call(batch: list[str] = batch, start: int = start) -> list[list[float]]:
                vectors = await self.provider.embed_documents(batch, self.dimensions)
                if len(vectors) != len(batch):
                    raise EmbeddingError(
                        f"Expected {len(batch)} embeddings, got {len(vectors)}",
                        context={"batch_start": start},
                    )
                return [self._check_dimensions(list(v)) for v in vectors]

            embeddings.extend(await self._with_retries("Batch embeddings", call))

        return embeddings
