"""Integration tests for FastAPI endpoints."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from sbwc_assistant.adapters.inbound.api.deps import get_chat
from sbwc_assistant.adapters.inbound.api.main import app
from sbwc_assistant.core.domain import AnswerStream, ChatResponse, ChatState, Citation
from sbwc_assistant.core.domain.exceptions import (
    EmbeddingError,
    InvalidInputError,
    MissingAPIKeyError,
    StreamError,
)

pytestmark = pytest.mark.integration

CITATIONS = [
    Citation(name="Guide.pdf", document_id="doc-1", relevance="90.0%", url="https://signed/doc-1"),
    Citation(name="Rules.pdf", document_id="doc-2", relevance="60.0%", error="No signed URL returned"),
]


def streamed_response(tokens, error=None, citations=CITATIONS):
    stream = AnswerStream()
    for token in tokens:
        stream.push(token)
    if error is None:
        stream.close()
    else:
        stream.fail(error)
    return ChatResponse(stream=stream, citations=list(citations))


@pytest.fixture
def chat_service():
    mock = MagicMock()
    mock.chat = AsyncMock()
    return mock


@pytest.fixture
def client(chat_service):
    """Create test client with the chat service overridden."""
    app.dependency_overrides[get_chat] = lambda: chat_service
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


def read_lines(response):
    return [json.loads(line) for line in response.text.splitlines() if line.strip()]


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    def test_health_check(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "version" in data


class TestChatEndpoint:
    """Tests for the streaming chat endpoint."""

    def test_streams_citations_tokens_and_done(self, client, chat_service):
        chat_service.chat.return_value = streamed_response(["Workers ", "must report."])

        response = client.post(
            "/api/v1/chat",
            json={"messages": [{"role": "user", "content": "\ufeffHow do I report?"}]},
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/x-ndjson")

        lines = read_lines(response)
        assert lines[0] == {
            "type": "citations",
            "citations": [
                {"name": "Guide.pdf", "documentId": "doc-1", "url": "https://signed/doc-1", "relevance": "90.0%"},
                {"name": "Rules.pdf", "documentId": "doc-2", "relevance": "60.0%", "error": "No signed URL returned"},
            ],
        }
        assert lines[1:] == [
            {"type": "token", "text": "Workers "},
            {"type": "token", "text": "must report."},
            {"type": "done"},
        ]

        messages = chat_service.chat.await_args.args[0]
        assert messages[0].content == "How do I report?"

    def test_mid_stream_error_line(self, client, chat_service):
        chat_service.chat.return_value = streamed_response(["Partial"], StreamError("reset"))

        lines = read_lines(client.post("/api/v1/chat", json={"messages": [{"role": "user", "content": "q"}]}))

        assert lines[-1] == {"type": "error", "state": "failed", "message": "reset"}
        assert len(lines[0]["citations"]) == 2

    def test_pipeline_failure_is_reported_on_stream(self, client, chat_service):
        chat_service.chat.return_value = ChatResponse.failed(
            EmbeddingError("quota exhausted"), ChatState.EMBED_FAILED
        )

        response = client.post("/api/v1/chat", json={"messages": [{"role": "user", "content": "q"}]})

        assert response.status_code == 200
        assert read_lines(response) == [
            {"type": "citations", "citations": []},
            {"type": "error", "state": "embed_failed", "message": "quota exhausted"},
        ]

    def test_empty_history_reaches_service(self, client, chat_service):
        chat_service.chat.return_value = ChatResponse.failed(
            InvalidInputError("No messages provided"), ChatState.VALIDATION_FAILED
        )

        lines = read_lines(client.post("/api/v1/chat", json={"messages": []}))

        assert chat_service.chat.await_args.args[0] == []
        assert lines[-1]["state"] == "validation_failed"

    def test_malformed_body_is_rejected(self, client):
        response = client.post("/api/v1/chat", json={"messages": [{"content": "no role"}]})
        assert response.status_code == 422

    def test_configuration_error_returns_structured_json(self, client, chat_service):
        chat_service.chat.side_effect = MissingAPIKeyError("Google API key not set")

        response = client.post("/api/v1/chat", json={"messages": [{"role": "user", "content": "q"}]})

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "SBWC_CFG_002"
