"""Text helpers applied to input at the inbound boundaries."""

import unicodedata


def normalize_text(text: str) -> str:
    """Remove BOM/replacement characters, apply NFKC and trim whitespace.

    Args:
        text: Input text that may contain BOM or special characters.

    Returns:
        Cleaned text, or an empty string for falsy input.
    """
    if not text:
        return ""

    cleaned = text.replace("\ufeff", "").replace("\ufffd", "")
    return unicodedata.normalize("NFKC", cleaned).strip()
