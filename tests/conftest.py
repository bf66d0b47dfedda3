"""
Pytest configuration and shared fixtures.
"""

import asyncio

import pytest

from sbwc_assistant.core.domain import DocumentMatch
from sbwc_assistant.core.ports import LLMPort, UrlSignerPort


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (FastAPI app, mocked services)")
    config.addinivalue_line("markers", "slow: Slow tests (network, large data)")


def make_match(
    document_id: str = "doc-1",
    similarity: float = 0.8,
    *,
    section_id: str | None = None,
    content: str = "Employers must report injuries within 7 days.",
    heading: str | None = "Reporting",
    document_name: str | None = None,
    storage_path: str | None = None,
) -> DocumentMatch:
    """Build a DocumentMatch with sensible defaults."""
    return DocumentMatch(
        id=section_id or f"{document_id}-s{int(similarity * 100)}",
        document_id=document_id,
        content=content,
        heading=heading,
        similarity=similarity,
        document_name=document_name or f"{document_id}.pdf",
        storage_path=storage_path or f"documents/{document_id}.pdf",
    )


class FakeSigner(UrlSignerPort):
    """URL signer returning predictable URLs, with per-locator overrides."""

    def __init__(self, failures: dict | None = None, urls: dict | None = None):
        self.failures = failures or {}
        self.urls = urls or {}
        self.calls: list[tuple[str, int]] = []
        self.active = 0
        self.max_active = 0

    async def create_signed_url(self, locator: str, expires_in: int) -> str | None:
        self.calls.append((locator, expires_in))
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(0)
            if locator in self.failures:
                raise self.failures[locator]
            if locator in self.urls:
                return self.urls[locator]
            return f"https://signed.example/{locator}?exp={expires_in}"
        finally:
            self.active -= 1


class FakeLLM(LLMPort):
    """LLM that streams fixed chunks and optionally fails after them."""

    def __init__(self, chunks: list[str] | None = None, error: Exception | None = None):
        self.chunks = chunks if chunks is not None else ["Hello", ", ", "world"]
        self.error = error
        self.calls: list[dict] = []

    async def stream_chat(self, messages, temperature=0.7, max_tokens=1000):
        self.calls.append(
            {"messages": list(messages), "temperature": temperature, "max_tokens": max_tokens}
        )
        for chunk in self.chunks:
            yield chunk
        if self.error is not None:
            raise self.error


@pytest.fixture
def match_factory():
    """Factory for DocumentMatch instances."""
    return make_match


@pytest.fixture
def fake_signer():
    """URL signer that always succeeds."""
    return FakeSigner()


@pytest.fixture
def fake_llm():
    """LLM streaming three chunks."""
    return FakeLLM()


@pytest.fixture
def make_signer():
    """Factory for FakeSigner with failure or URL overrides."""
    return FakeSigner


@pytest.fixture
def make_llm():
    """Factory for FakeLLM with custom chunks or a trailing error."""
    return FakeLLM
