"""Formats retrieved sections into prompt-ready grounding context."""

from ..domain import DocumentMatch
from .prompts import SYSTEM_PROMPT_TEMPLATE

NO_CONTEXT = "No relevant context found."


def build_context(matches: list[DocumentMatch]) -> str:
    """Build the context block for the LLM prompt.

    Input order is preserved; the vector store already sorts by relevance.

    Args:
        matches: Document matches from vector search.

    Returns:
        Formatted context, or ``NO_CONTEXT`` when there are no matches.

    Example:
        --- Source 1 (Relevance: 85.3%) ---
        Document: safety-manual.pdf
        Section: Safety Requirements
        Content: All workers must wear...
    """
    if not matches:
        return NO_CONTEXT

    blocks = []
    for index, match in enumerate(matches, start=1):
        parts = [
            f"--- Source {index} (Relevance: {match.relevance}) ---",
            f"Document: {match.document_name}",
        ]
        if match.heading:
            parts.append(f"Section: {match.heading}")
        parts.append(f"Content: {match.content.strip()}")
        blocks.append("\n".join(parts))

    return "\n\n".join(blocks)


def build_sources_line(matches: list[DocumentMatch]) -> str:
    """List unique document names as a bold ``Sources consulted`` paragraph."""
    names = list(dict.fromkeys(match.document_name for match in matches))
    if not names:
        return ""
    return f"\n\n**Sources consulted**: {', '.join(names)}"


def build_system_prompt(context: str, sources_line: str = "") -> str:
    """Fill the system prompt template with grounding context and sources."""
    return SYSTEM_PROMPT_TEMPLATE.format(context=context, sources=sources_line).rstrip()
