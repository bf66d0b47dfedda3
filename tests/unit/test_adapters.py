"""Tests for outbound adapters with their SDKs mocked out."""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import requests
from botocore.exceptions import ClientError

from sbwc_assistant.adapters.outbound.embedding.gemini_embedding_adapter import (
    GeminiEmbeddingAdapter,
)
from sbwc_assistant.adapters.outbound.llm.gemini_chat_adapter import GeminiChatAdapter
from sbwc_assistant.adapters.outbound.storage.s3_signer import S3UrlSigner
from sbwc_assistant.adapters.outbound.vector_store.qdrant_adapter import QdrantSearchAdapter
from sbwc_assistant.core.domain import ChatMessage
from sbwc_assistant.core.domain.exceptions import (
    ConfigurationError,
    EmbeddingAPIError,
    EmbeddingRateLimitError,
    LLMError,
    MissingAPIKeyError,
    SearchError,
    StorageError,
)

pytestmark = pytest.mark.unit


def http_response(status_code=200, payload=None, text=""):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload or {}
    response.text = text
    return response


class TestGeminiEmbeddingAdapter:
    """Tests for the Gemini REST embedding adapter."""

    @pytest.fixture
    def session(self):
        return MagicMock(spec=requests.Session)

    @pytest.fixture
    def adapter(self, session):
        return GeminiEmbeddingAdapter("test-key", session=session)

    def test_requires_api_key(self):
        with pytest.raises(MissingAPIKeyError):
            GeminiEmbeddingAdapter("")

    def test_default_uses_module_level_post(self):
        adapter = GeminiEmbeddingAdapter("test-key", timeout=8)
        with patch("requests.post") as post:
            post.return_value = http_response(payload={"embeddings": [{"values": [0.5]}]})

            assert asyncio.run(adapter.embed_query("hello", 1)) == [0.5]

        assert post.call_args.kwargs["timeout"] == 8

    def test_embed_query(self, adapter, session):
        session.post.return_value = http_response(
            payload={"embeddings": [{"values": [0.1, 0.2]}]}
        )

        assert asyncio.run(adapter.embed_query("hello", 2)) == [0.1, 0.2]

        kwargs = session.post.call_args.kwargs
        assert session.post.call_args.args[0].endswith(
            "models/gemini-embedding-001:batchEmbedContents"
        )
        assert kwargs["params"] == {"key": "test-key"}
        request = kwargs["json"]["requests"][0]
        assert request["taskType"] == "RETRIEVAL_QUERY"
        assert request["outputDimensionality"] == 2
        assert request["content"] == {"parts": [{"text": "hello"}]}

    def test_embed_documents(self, adapter, session):
        session.post.return_value = http_response(
            payload={"embeddings": [{"values": [1.0]}, {"values": [2.0]}]}
        )

        assert asyncio.run(adapter.embed_documents(["a", "b"], 1)) == [[1.0], [2.0]]
        assert session.post.call_args.kwargs["json"]["requests"][1]["taskType"] == (
            "RETRIEVAL_DOCUMENT"
        )

    def test_embed_documents_empty(self, adapter, session):
        assert asyncio.run(adapter.embed_documents([], 1)) == []
        session.post.assert_not_called()

    def test_rate_limit(self, adapter, session):
        session.post.return_value = http_response(status_code=429)

        with pytest.raises(EmbeddingRateLimitError):
            asyncio.run(adapter.embed_query("hello", 2))

    def test_http_error(self, adapter, session):
        session.post.return_value = http_response(status_code=500, text="internal")

        with pytest.raises(EmbeddingAPIError, match="HTTP 500"):
            asyncio.run(adapter.embed_query("hello", 2))

    def test_network_error(self, adapter, session):
        session.post.side_effect = requests.ConnectionError("dns")

        with pytest.raises(EmbeddingAPIError, match="Embedding request failed"):
            asyncio.run(adapter.embed_query("hello", 2))

    def test_missing_embeddings(self, adapter, session):
        session.post.return_value = http_response(payload={"embeddings": []})

        with pytest.raises(EmbeddingAPIError, match="No embedding returned"):
            asyncio.run(adapter.embed_query("hello", 2))


def point(point_id, score, **payload):
    base = {
        "document_id": "doc-1",
        "content": "Section text",
        "heading": "Intro",
        "document_name": "Guide.pdf",
        "storage_path": "docs/guide.pdf",
    }
    base.update(payload)
    return SimpleNamespace(id=point_id, score=score, payload=base)


class TestQdrantSearchAdapter:
    """Tests for the Qdrant vector store adapter."""

    @pytest.fixture
    def client(self):
        mock = MagicMock()
        mock.query_points = AsyncMock()
        return mock

    @pytest.fixture
    def adapter(self, client):
        return QdrantSearchAdapter("https://qdrant.test", "key", "sections", client=client)

    def test_maps_points_to_matches(self, adapter, client):
        client.query_points.return_value = SimpleNamespace(
            points=[point("s1", 0.9), point("s2", 0.7, heading="", document_id="doc-2")]
        )

        matches = asyncio.run(adapter.search([0.1], threshold=0.5, limit=5))

        assert [(m.id, m.document_id, m.similarity) for m in matches] == [
            ("s1", "doc-1", 0.9),
            ("s2", "doc-2", 0.7),
        ]
        assert matches[1].heading is None
        assert matches[0].storage_path == "docs/guide.pdf"

        kwargs = client.query_points.call_args.kwargs
        assert kwargs["collection_name"] == "sections"
        assert kwargs["score_threshold"] == 0.5
        assert kwargs["limit"] == 5
        assert kwargs["query_filter"] is None

    def test_score_equal_to_threshold_is_dropped(self, adapter, client):
        client.query_points.return_value = SimpleNamespace(points=[point("s1", 0.5)])

        assert asyncio.run(adapter.search([0.1], threshold=0.5, limit=5)) == []

    def test_allowlist_builds_filter(self, adapter, client):
        client.query_points.return_value = SimpleNamespace(points=[])

        asyncio.run(adapter.search([0.1], 0.5, 5, allowed_document_ids={"b", "a"}))

        query_filter = client.query_points.call_args.kwargs["query_filter"]
        condition = query_filter.must[0]
        assert condition.key == "document_id"
        assert condition.match.any == ["a", "b"]

    def test_query_failure(self, adapter, client):
        client.query_points.side_effect = RuntimeError("collection not found")

        with pytest.raises(SearchError, match="collection not found"):
            asyncio.run(adapter.search([0.1], 0.5, 5))

    def test_malformed_payload(self, adapter, client):
        bad = SimpleNamespace(id="s1", score=0.9, payload={"content": "no document id"})
        client.query_points.return_value = SimpleNamespace(points=[bad])

        with pytest.raises(SearchError, match="Malformed search row"):
            asyncio.run(adapter.search([0.1], 0.5, 5))

    def test_missing_url(self):
        adapter = QdrantSearchAdapter("", "")

        with pytest.raises(SearchError) as exc_info:
            asyncio.run(adapter.search([0.1], 0.5, 5))

        assert isinstance(exc_info.value.cause, MissingAPIKeyError)


class TestS3UrlSigner:
    """Tests for the presigned URL adapter."""

    def test_presigns_get_object(self):
        client = MagicMock()
        client.generate_presigned_url.return_value = "https://bucket.test/doc.pdf?sig=1"
        signer = S3UrlSigner(bucket="docs", client=client)

        url = asyncio.run(signer.create_signed_url("cases/doc.pdf", 3600))

        assert url == "https://bucket.test/doc.pdf?sig=1"
        client.generate_presigned_url.assert_called_once_with(
            "get_object",
            Params={"Bucket": "docs", "Key": "cases/doc.pdf"},
            ExpiresIn=3600,
        )

    def test_empty_url_is_none(self):
        client = MagicMock()
        client.generate_presigned_url.return_value = ""

        assert asyncio.run(S3UrlSigner(bucket="docs", client=client).create_signed_url("k", 60)) is None

    def test_client_error_becomes_storage_error(self):
        client = MagicMock()
        client.generate_presigned_url.side_effect = ClientError(
            {"Error": {"Code": "NoSuchKey", "Message": "missing"}}, "GetObject"
        )
        signer = S3UrlSigner(bucket="docs", client=client)

        with pytest.raises(StorageError):
            asyncio.run(signer.create_signed_url("k", 60))

    def test_requires_bucket(self):
        with pytest.raises(ConfigurationError):
            S3UrlSigner(bucket="", client=MagicMock())

    def test_requires_credentials(self):
        with pytest.raises(ConfigurationError, match="credentials"):
            S3UrlSigner(bucket="docs")


class TestGeminiChatAdapter:
    """Tests for the streaming Gemini chat adapter."""

    @staticmethod
    def streaming_client(chunks=None, error=None):
        async def stream():
            for text in chunks or []:
                yield SimpleNamespace(text=text)
            if error is not None:
                raise error

        client = MagicMock()
        client.aio.models.generate_content_stream = AsyncMock(return_value=stream())
        return client

    @staticmethod
    async def collect(adapter, messages):
        return [chunk async for chunk in adapter.stream_chat(messages, temperature=0.3, max_tokens=99)]

    def test_streams_text(self):
        client = self.streaming_client(["Hel", "", "lo"])
        adapter = GeminiChatAdapter("key", "gemini-test", client=client)
        messages = [
            ChatMessage("system", "Be brief."),
            ChatMessage("user", "Hi"),
            ChatMessage("assistant", "Hello"),
            ChatMessage("user", "Bye"),
        ]

        assert asyncio.run(self.collect(adapter, messages)) == ["Hel", "lo"]

        kwargs = client.aio.models.generate_content_stream.call_args.kwargs
        assert kwargs["model"] == "gemini-test"
        assert [c.role for c in kwargs["contents"]] == ["user", "model", "user"]
        assert kwargs["config"].system_instruction == "Be brief."
        assert kwargs["config"].temperature == 0.3
        assert kwargs["config"].max_output_tokens == 99

    def test_provider_error_becomes_llm_error(self):
        adapter = GeminiChatAdapter("key", client=self.streaming_client(["a"], RuntimeError("reset")))

        with pytest.raises(LLMError, match="Gemini streaming failed: reset"):
            asyncio.run(self.collect(adapter, [ChatMessage("user", "Hi")]))

    def test_missing_api_key(self):
        adapter = GeminiChatAdapter("")

        with pytest.raises(MissingAPIKeyError):
            asyncio.run(self.collect(adapter, [ChatMessage("user", "Hi")]))
