"""
Chat engine configuration settings.

Process-wide defaults for every per-call chat option plus the search
and analytics tuning knobs that are not exposed on the wire.

Dependencies: pydantic, pydantic_settings
System role: Retrieval and conversation configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from chat_engine.configs.base import BaseSettings


class ChatSettings(BaseSettings):
    """Conversation engine defaults (CHAT_ prefix)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CHAT_",
        case_sensitive=False,
        extra="ignore",
    )

    max_context_items: int = Field(default=5, ge=0, le=50, description="Search results injected into context")
    similarity_threshold: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Minimum similarity score for retrieval (0.0-1.0)",
    )
    history_limit: int = Field(default=10, ge=0, le=200, description="Prior messages carried into context")
    model: str = Field(default="gpt-4-turbo", description="Downstream generator model name")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0, description="Downstream sampling temperature")
    use_hybrid_search: bool = Field(default=True, description="Run vector search alongside lexical")
    show_search_metrics: bool = Field(default=False, description="Expose metadata on context items")
    persist_conversations: bool = Field(default=True, description="Store messages and analytics")

    match_count: int = Field(default=5, ge=1, le=100, description="Result-count cap per search")
    content_types: list[str] = Field(
        default=["general_info", "project"],
        description="Corpus content types searched by default",
    )
    max_query_length: int = Field(default=4000, ge=1, description="Longest accepted query text")
    max_session_key_length: int = Field(default=255, ge=1, description="Longest accepted session key")
    owner_name: str | None = Field(
        default=None,
        description="Portfolio owner name, used by query intent detection",
    )

    analytics_drain_timeout: float = Field(
        default=5.0,
        ge=0.0,
        description="Seconds to wait for pending analytics writes at shutdown",
    )
