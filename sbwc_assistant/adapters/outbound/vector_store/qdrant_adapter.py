"""Qdrant adapter implementing the vector store port.

Each point in the collection is one document section. Its payload carries
the owning document's name and storage path alongside the section text, so
a single query returns everything needed to build context and citations.
"""

import logging
from collections.abc import Collection
from typing import TYPE_CHECKING

from ....core.domain import DocumentMatch
from ....core.domain.exceptions import MissingAPIKeyError, SearchError
from ....core.ports.vector_store_port import VectorStorePort

if TYPE_CHECKING:
    from qdrant_client import AsyncQdrantClient

logger = logging.getLogger(__name__)

DOCUMENT_ID_FIELD = "document_id"


class QdrantSearchAdapter(VectorStorePort):
    """Searches document sections stored in a Qdrant collection."""

    def __init__(
        self,
        url: str,
        api_key: str,
        collection_name: str = "sbwc_document_sections",
        client: "AsyncQdrantClient | None" = None,
    ) -> None:
        """Initialize the Qdrant adapter.

        Args:
            url: Qdrant cluster URL.
            api_key: Qdrant API key.
            collection_name: Collection holding the section vectors.
            client: Preconfigured client, mainly for tests.
        """
        self.url = url
        self.api_key = api_key
        self.collection_name = collection_name
        self._client = client

    def _get_client(self) -> "AsyncQdrantClient":
        """Get or create the Qdrant client connection."""
        if self._client is None:
            if not self.url:
                raise MissingAPIKeyError("Qdrant URL not set. Set QDRANT_URL in your .env file.")

            from qdrant_client import AsyncQdrantClient

            self._client = AsyncQdrantClient(url=self.url, api_key=self.api_key or None)
            logger.info("Connected to Qdrant at: %s", self.url)

        return self._client

    @staticmethod
    def _build_filter(allowed_document_ids: Collection[str] | None):
        if allowed_document_ids is None:
            return None

        from qdrant_client.models import FieldCondition, Filter, MatchAny

        return Filter(
            must=[
                FieldCondition(
                    key=DOCUMENT_ID_FIELD,
                    match=MatchAny(any=sorted(allowed_document_ids)),
                )
            ]
        )

    async def search(
        self,
        vector: list[float],
        threshold: float,
        limit: int,
        allowed_document_ids: Collection[str] | None = None,
    ) -> list[DocumentMatch]:
        """Query the collection for sections scoring above ``threshold``.

        Raises:
            SearchError: If the client cannot be created or the query fails.
        """
        try:
            client = self._get_client()
            results = await client.query_points(
                collection_name=self.collection_name,
                query=vector,
                limit=limit,
                score_threshold=threshold,
                query_filter=self._build_filter(allowed_document_ids),
                with_payload=True,
            )
        except Exception as e:
            logger.error("Qdrant query failed on %s: %s", self.collection_name, e)
            raise SearchError(
                f"Vector search failed: {e}",
                cause=e,
                context={"collection": self.collection_name},
            ) from e

        matches = []
        for hit in results.points:
            # score_threshold is inclusive; the floor is strict
            if hit.score <= threshold:
                continue
            payload = dict(hit.payload or {})
            payload.setdefault("section_id", hit.id)
            try:
                matches.append(DocumentMatch.from_row(payload, similarity=hit.score))
            except KeyError as e:
                raise SearchError(
                    f"Malformed search row, missing field {e}",
                    cause=e,
                    context={"point_id": str(hit.id)},
                ) from e

        return matches
