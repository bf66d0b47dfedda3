"""Vector search gateway over the section-matching vector store."""

import logging
from collections.abc import Collection

from ..domain import DEFAULT_MATCH_COUNT, DEFAULT_MATCH_THRESHOLD, DocumentMatch, SearchQuery
from ..domain.exceptions import InvalidInputError, SearchError
from ..ports.vector_store_port import VectorStorePort

logger = logging.getLogger(__name__)


def filter_by_threshold(matches: list[DocumentMatch], threshold: float) -> list[DocumentMatch]:
    """Keep matches whose similarity is at least ``threshold``."""
    return [match for match in matches if match.similarity >= threshold]


def group_by_document(matches: list[DocumentMatch]) -> dict[str, list[DocumentMatch]]:
    """Group matches by owning document, in first-seen document order."""
    groups: dict[str, list[DocumentMatch]] = {}
    for match in matches:
        groups.setdefault(match.document_id, []).append(match)
    return groups


class SearchService:
    """Finds document sections similar to a query vector.

    Results keep the store's descending-similarity order. Store failures
    surface as SearchError and are not retried here.
    """

    def __init__(self, vector_store: VectorStorePort) -> None:
        self.vector_store = vector_store

    async def search(
        self,
        vector: list[float],
        threshold: float = DEFAULT_MATCH_THRESHOLD,
        limit: int = DEFAULT_MATCH_COUNT,
        allowed_document_ids: Collection[str] | None = None,
    ) -> list[DocumentMatch]:
        """Search for relevant document sections.

        Args:
            vector: Query embedding.
            threshold: Only matches with similarity strictly above this are kept.
            limit: Maximum number of matches.
            allowed_document_ids: Optional allowlist; ``None`` searches everything.

        Returns:
            Matches sorted by descending similarity; possibly empty.

        Raises:
            InvalidInputError: If threshold or limit is out of range.
            SearchError: If the vector store call fails.
        """
        if not 0.0 <= threshold <= 1.0:
            raise InvalidInputError(
                "threshold must be between 0 and 1", context={"threshold": threshold}
            )
        if limit < 1:
            raise InvalidInputError("limit must be positive", context={"limit": limit})

        allowed = None if allowed_document_ids is None else set(allowed_document_ids)
        if allowed is not None and not allowed:
            return []

        try:
            rows = await self.vector_store.search(vector, threshold, limit, allowed)
        except SearchError:
            raise
        except Exception as e:
            logger.error("Vector search error: %s", e)
            raise SearchError(f"Vector search failed: {e}", cause=e) from e

        if not rows:
            return []

        matches = [
            row
            for row in rows
            if row.similarity > threshold and (allowed is None or row.document_id in allowed)
        ]
        if len(matches) != len(rows):
            logger.debug("Dropped %d rows outside threshold or allowlist", len(rows) - len(matches))
        return matches[:limit]

    async def search_query(self, vector: list[float], query: SearchQuery) -> list[DocumentMatch]:
        """Search using the threshold, limit and allowlist carried by ``query``."""
        return await self.search(
            vector,
            threshold=query.threshold,
            limit=query.limit,
            allowed_document_ids=query.allowed_document_ids,
        )
