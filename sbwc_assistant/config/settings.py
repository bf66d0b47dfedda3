"""Configuration management for the SBWC assistant."""

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _sanitize_secret(value: str) -> str:
    """Remove BOM characters and whitespace from secrets.

    Secrets injected through environment variables may carry a BOM that
    breaks HTTP headers.
    """
    if not value:
        return value
    return value.lstrip("\ufeff").strip()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Google AI API (embeddings + chat)
    google_api_key: str = ""

    # Qdrant settings
    qdrant_url: str = ""
    qdrant_api_key: str = ""
    qdrant_collection: str = "sbwc_document_sections"

    # Object storage (S3-compatible) for source PDFs
    storage_endpoint_url: str = ""
    storage_access_key_id: str = ""
    storage_secret_access_key: str = ""
    storage_region: str = "auto"
    storage_bucket: str = "sbwc-documents"

    @field_validator(
        "google_api_key",
        "qdrant_api_key",
        "qdrant_url",
        "storage_access_key_id",
        "storage_secret_access_key",
        mode="after",
    )
    @classmethod
    def sanitize_secrets(cls, value: str) -> str:
        """Remove BOM and whitespace from secret values."""
        return _sanitize_secret(value)

    # Embedding settings
    embedding_model: str = "models/gemini-embedding-001"
    embedding_dimensions: int = 1536
    embedding_max_retries: int = 3
    embedding_retry_base_delay: float = 1.0
    # Per-attempt HTTP timeout for embedding requests
    embedding_request_timeout_seconds: float = 8.0
    embedding_batch_size: int = 100

    # Model settings
    llm_model: str = "gemini-2.0-flash"
    llm_temperature: float = 0.7
    llm_max_tokens: int = 1000

    # RAG settings
    # 0.45 suits natural-language questions over legal case documents,
    # which typically land at 40-55% similarity with this embedding model.
    rag_match_threshold: float = 0.45
    rag_match_count: int = 5
    citation_url_expiry_seconds: int = 3600
    citation_max_concurrency: int = 8

    # Timeouts
    retrieval_timeout_seconds: float = 30.0
    stream_timeout_seconds: float = 120.0

    # Logging
    log_level: str = "INFO"
    log_json: bool = False
    log_file: Path | None = None
    debug: bool = False


# Global settings instance
settings = Settings()
