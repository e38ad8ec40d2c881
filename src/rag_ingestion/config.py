"""Shared configuration loaded from environment / ``.env``."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings

from rag_ingestion.errors import ConfigurationError


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file."""

    # Vector store (Weaviate REST)
    weaviate_url: str = Field(
        default="",
        description="Weaviate endpoint. A bare host such as 'my-cluster.weaviate.network' is served over https.",
    )
    weaviate_api_key: str = ""
    collection_name: str = "RagDocuments"

    # Embedding provider key forwarded to Weaviate's text2vec-openai module
    openai_api_key: str = ""
    embedding_model: str = "text-embedding-3-large"

    # Extraction API (Anthropic Messages)
    anthropic_api_key: str = ""
    anthropic_base_url: str = "https://api.anthropic.com"
    anthropic_model: str = "claude-sonnet-4-5"
    anthropic_version: str = "2023-06-01"

    # File storage (Supabase)
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    supabase_files_table: str = "uploaded_files"
    supabase_bucket: str = "uploaded-files"

    # Chunking / upload
    chunk_size: int = 220
    chunk_overlap: int = 40
    upload_batch_size: int = 100
    max_file_bytes: int = 25 * 1024 * 1024
    max_chunks_per_file: int = 5000

    # HTTP
    request_timeout: float = 120.0
    http_max_attempts: int = Field(default=1, ge=1, description="1 disables retries")

    # Serving
    cors_allow_origins: list[str] = ["*"]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @property
    def weaviate_base_url(self) -> str:
        """Weaviate URL with an explicit scheme and no trailing slash."""
        url = self.weaviate_url.strip()
        if url and not url.startswith(("http://", "https://")):
            url = f"https://{url}"
        return url.rstrip("/")

    def require(self, *fields: str) -> None:
        """Raise :class:`ConfigurationError` naming every empty *field*."""
        missing = [name.upper() for name in fields if not getattr(self, name)]
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}"
            )


INLINE_REQUIRED = ("weaviate_url", "weaviate_api_key", "openai_api_key")
STORED_REQUIRED = INLINE_REQUIRED + (
    "anthropic_api_key",
    "supabase_url",
    "supabase_service_role_key",
)


# Singleton: import `settings` wherever needed.
settings = Settings()
