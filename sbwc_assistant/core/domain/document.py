"""Search query and document match models for the RAG system."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

DEFAULT_MATCH_THRESHOLD = 0.45
DEFAULT_MATCH_COUNT = 5


def format_relevance(similarity: float) -> str:
    """Render a similarity score as a percentage with one decimal place.

    Example:
        >>> format_relevance(0.853)
        '85.3%'
    """
    return f"{similarity * 100:.1f}%"


@dataclass(frozen=True)
class SearchQuery:
    """Input for one vector search, constructed per request.

    Attributes:
        text: Raw query text.
        threshold: Similarity floor; only matches strictly above it are returned.
        limit: Maximum number of matches.
        allowed_document_ids: Document id allowlist. ``None`` searches every
            document; an empty collection allows none.
    """

    text: str
    threshold: float = DEFAULT_MATCH_THRESHOLD
    limit: int = DEFAULT_MATCH_COUNT
    allowed_document_ids: frozenset[str] | None = None

    @classmethod
    def create(
        cls,
        text: str,
        threshold: float = DEFAULT_MATCH_THRESHOLD,
        limit: int = DEFAULT_MATCH_COUNT,
        allowed_document_ids: Iterable[str] | None = None,
    ) -> "SearchQuery":
        allowed = frozenset(allowed_document_ids) if allowed_document_ids is not None else None
        return cls(text=text, threshold=threshold, limit=limit, allowed_document_ids=allowed)


@dataclass(frozen=True)
class DocumentMatch:
    """One matched document section returned by the vector store.

    Several matches may share a ``document_id`` when more than one section
    of the same document clears the threshold.

    Attributes:
        id: Section identifier.
        document_id: Owning document identifier.
        content: Section text.
        heading: Section heading, if the section has one.
        similarity: Cosine-derived score in [0, 1].
        document_name: Display name of the owning document.
        storage_path: Object storage locator used to mint access URLs.
    """

    id: str
    document_id: str
    content: str
    heading: str | None
    similarity: float
    document_name: str
    storage_path: str

    @property
    def relevance(self) -> str:
        """Similarity as a percentage string, e.g. ``"85.3%"``."""
        return format_relevance(self.similarity)

    @classmethod
    def from_row(cls, row: Mapping[str, Any], similarity: float | None = None) -> "DocumentMatch":
        """Build a match from a vector store row or point payload.

        Args:
            row: Mapping with ``section_id`` (or ``id``), ``document_id``,
                ``content``, ``heading``, ``document_name``, ``storage_path``
                and, unless given separately, ``similarity``.
            similarity: Score reported alongside the payload.
        """
        section_id = row.get("section_id", row.get("id"))
        score = similarity if similarity is not None else row["similarity"]
        return cls(
            id=str(section_id),
            document_id=str(row["document_id"]),
            content=row.get("content") or "",
            heading=row.get("heading") or None,
            similarity=float(score),
            document_name=row.get("document_name") or "",
            storage_path=row.get("storage_path") or "",
        )
