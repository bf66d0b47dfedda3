"""Citation resolution: dedupe matches by document and mint signed URLs.

Citation failures never break a chat answer. Each document's URL is minted
independently, a failed mint is recorded on that document's citation, and
any unexpected failure of the whole pass falls back to URL-less citations.
"""

import asyncio
import logging
from collections.abc import Callable

from ..domain import Citation, DocumentMatch, format_relevance
from ..domain.exceptions import CitationMintError, StorageError
from ..ports.storage_port import UrlSignerPort
from .search_service import group_by_document

logger = logging.getLogger(__name__)

DEFAULT_URL_EXPIRY_SECONDS = 3600
NO_URL_RETURNED = "No signed URL returned"
FALLBACK_ERROR = "Failed to generate citations"


def select_representatives(matches: list[DocumentMatch]) -> dict[str, DocumentMatch]:
    """Pick the highest-similarity match per document.

    Documents keep first-seen order and ties keep the earlier match.
    """
    return {
        document_id: max(group, key=lambda m: m.similarity)
        for document_id, group in group_by_document(matches).items()
    }


def sort_by_relevance(citations: list[Citation]) -> list[Citation]:
    """Order citations by numeric relevance, highest first."""
    return sorted(citations, key=lambda c: c.relevance_score, reverse=True)


class CitationService:
    """Resolves document matches into ranked citations with signed URLs."""

    def __init__(
        self,
        signer_factory: Callable[[], UrlSignerPort],
        max_concurrency: int | None = None,
    ) -> None:
        """Initialize the citation service.

        Args:
            signer_factory: Returns the URL signer; called once per resolve.
            max_concurrency: Upper bound on simultaneous mint calls
                (``None`` or ``<= 0`` for unbounded).
        """
        self._signer_factory = signer_factory
        self.max_concurrency = max_concurrency if max_concurrency and max_concurrency > 0 else None

    async def resolve(
        self,
        matches: list[DocumentMatch],
        expiry_seconds: int = DEFAULT_URL_EXPIRY_SECONDS,
    ) -> list[Citation]:
        """Build one citation per unique document, sorted by relevance.

        Args:
            matches: Matches from vector search; may repeat a document.
            expiry_seconds: Lifetime of each signed URL.

        Returns:
            Citations, highest relevance first. Never raises.
        """
        if not matches:
            return []

        try:
            representatives = select_representatives(matches)
            signer = self._signer_factory()
            semaphore = asyncio.Semaphore(self.max_concurrency) if self.max_concurrency else None

            citations = await asyncio.gather(
                *(
                    self._mint(signer, match, expiry_seconds, semaphore)
                    for match in representatives.values()
                )
            )
            return sort_by_relevance(list(citations))
        except Exception:
            logger.exception("Error resolving citations, returning citations without URLs")
            return self._fallback(matches)

    async def _mint(
        self,
        signer: UrlSignerPort,
        match: DocumentMatch,
        expiry_seconds: int,
        semaphore: asyncio.Semaphore | None,
    ) -> Citation:
        try:
            if semaphore:
                async with semaphore:
                    url = await signer.create_signed_url(match.storage_path, expiry_seconds)
            else:
                url = await signer.create_signed_url(match.storage_path, expiry_seconds)
        except StorageError as e:
            failure = CitationMintError(
                f"Signing service error: {e.message}",
                reason=CitationMintError.PROVIDER_ERROR,
                cause=e,
                context={"document_id": match.document_id},
            )
            return self._failed_citation(match, failure)
        except Exception as e:
            failure = CitationMintError(
                str(e) or "Unknown error",
                reason=CitationMintError.PROVIDER_ERROR,
                cause=e,
                context={"document_id": match.document_id},
            )
            return self._failed_citation(match, failure)

        if not url:
            failure = CitationMintError(
                NO_URL_RETURNED,
                reason=CitationMintError.NO_URL,
                context={"document_id": match.document_id},
            )
            return self._failed_citation(match, failure)

        return Citation(
            name=match.document_name,
            document_id=match.document_id,
            relevance=match.relevance,
            url=url,
        )

    @staticmethod
    def _failed_citation(match: DocumentMatch, failure: CitationMintError) -> Citation:
        logger.warning(
            "Failed to generate signed URL for document %s (%s): %s",
            match.document_id,
            failure.reason,
            failure.message,
        )
        return Citation(
            name=match.document_name,
            document_id=match.document_id,
            relevance=match.relevance,
            error=failure.message,
        )

    @staticmethod
    def _fallback(matches: list[DocumentMatch]) -> list[Citation]:
        best: dict[str, DocumentMatch] = {}
        for match in matches:
            current = best.get(match.document_id)
            if current is None or match.similarity > current.similarity:
                best[match.document_id] = match

        return sort_by_relevance(
            [
                Citation(
                    name=match.document_name,
                    document_id=document_id,
                    relevance=format_relevance(match.similarity),
                    error=FALLBACK_ERROR,
                )
                for document_id, match in best.items()
            ]
        )
