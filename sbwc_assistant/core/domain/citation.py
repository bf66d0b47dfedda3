"""Citation model returned alongside every chat answer."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Citation:
    """A resolved, user-facing reference to one source document.

    At most one citation exists per document in a response, carrying that
    document's best similarity among its matched sections.

    Attributes:
        name: Document display name.
        document_id: Document identifier.
        relevance: Percentage string with one decimal place, e.g. ``"85.3%"``.
        url: Time-limited access URL, ``None`` when minting failed.
        error: Human-readable description of why ``url`` is missing.
    """

    name: str
    document_id: str
    relevance: str
    url: str | None = None
    error: str | None = None

    @property
    def relevance_score(self) -> float:
        """Numeric value of ``relevance`` for ordering."""
        return float(self.relevance.rstrip("%"))

    @property
    def has_url(self) -> bool:
        return bool(self.url)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the caller-facing shape ``{name, documentId, url?, relevance, error?}``."""
        result: dict[str, Any] = {
            "name": self.name,
            "documentId": self.document_id,
            "relevance": self.relevance,
        }
        if self.url:
            result["url"] = self.url
        if self.error:
            result["error"] = self.error
        return result
