"""
Embedding provider configuration settings.

Selects the LangChain embeddings backend used to embed visitor queries.
The corpus embeddings must have been produced with the same model and
dimensionality.

Dependencies: pydantic, pydantic_settings
System role: Embedding configuration for vector retrieval
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from chat_engine.configs.base import BaseSettings


class EmbeddingSettings(BaseSettings):
    """Embedding provider configuration (EMBEDDING_ prefix)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="EMBEDDING_",
        case_sensitive=False,
        extra="ignore",
    )

    provider: Literal["google", "openai"] = Field(
        default="google",
        description="Embedding backend: 'google' (Gemini) or 'openai'",
    )
    model: str = Field(
        default="models/gemini-embedding-001",
        description="Embedding model ID for the selected provider",
    )
    dimensions: int = Field(
        default=1536,
        ge=1,
        description="Embedding vector dimension (must match corpus embeddings)",
    )
    api_key: str | None = Field(
        default=None,
        description="Provider API key (falls back to the provider's own env var)",
    )
    timeout: float = Field(default=10.0, gt=0, description="Embedding request timeout in seconds")
