"""
Chat domain models and schemas.

Request/response schemas for conversation turns, plus the per-call
ChatSystemConfig. Wire names are camelCase; Python code uses snake_case.

Dependencies: pydantic, chat_engine.configs
System role: Chat API contracts
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from chat_engine.configs.chat import ChatSettings


class CamelModel(BaseModel):
    """Base for wire models: camelCase aliases, snake_case attributes."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ChatSystemConfig(CamelModel):
    """
    Per-call conversation configuration.

    Immutable once built, so a turn sees the same values from start to end.
    Unset fields take the process defaults from ChatSettings.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    max_context_items: int = Field(default=5, ge=0, le=50)
    similarity_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    history_limit: int = Field(default=10, ge=0, le=200)
    model: str = Field(default="gpt-4-turbo")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    use_hybrid_search: bool = Field(default=True)
    show_search_metrics: bool = Field(default=False)
    persist_conversations: bool = Field(default=True)

    @classmethod
    def from_settings(cls, settings: ChatSettings, **overrides: Any) -> "ChatSystemConfig":
        """
        Build a config from process defaults with optional overrides.

        Args:
            settings: Chat settings holding the defaults
            **overrides: Field values (camelCase or snake_case) that replace defaults

        Returns:
            ChatSystemConfig: Frozen config

        Raises:
            pydantic.ValidationError: An override is out of range
        """
        values = {name: getattr(settings, name) for name in cls.model_fields}
        names_by_alias = {
            field.alias or name: name for name, field in cls.model_fields.items()
        }
        for key, value in overrides.items():
            values[names_by_alias.get(key, key)] = value
        return cls(**values)


class ChatContext(CamelModel):
    """Search result fields injected into the generator context."""

    content_id: str
    content_type: str
    similarity: float
    content: dict[str, Any]
    content_summary: str | None = None
    metadata: dict[str, Any] | None = None
    match_type: str | None = None


class ChatMessageResponse(CamelModel):
    """Single chat message in history."""

    role: str = Field(description="Message role: 'user' or 'assistant'")
    content: str = Field(description="Message content")
    created_at: datetime | None = Field(default=None, description="Server timestamp")


class TurnRequest(CamelModel):
    """Request schema for one conversation turn."""

    session_key: str = Field(description="Opaque client session key")
    query: str = Field(description="Visitor question")
    config: dict[str, Any] | None = Field(
        default=None,
        description="Partial ChatSystemConfig overrides (camelCase or snake_case)",
    )


class SearchMetrics(CamelModel):
    """Retrieval diagnostics returned when showSearchMetrics is set."""

    strategies: list[str]
    result_count: int
    vector_error: str | None = None
    elapsed_ms: float


class TurnResponse(CamelModel):
    """Response schema for one conversation turn."""

    session_id: UUID | None
    context: list[ChatContext]
    history: list[ChatMessageResponse]
    degraded: bool
    formatted_context: str = ""
    search_metrics: SearchMetrics | None = None
    relevant_project: dict[str, Any] | None = Field(
        default=None, description="Project the turn is most likely about, for the client to feature"
    )


class ReplyRequest(CamelModel):
    """Assistant reply produced downstream for a turn."""

    query: str = Field(description="Visitor question the reply answers")
    response: str = Field(description="Assistant reply text")
    config: dict[str, Any] | None = None


class ReplyResponse(CamelModel):
    """Acknowledgement for a stored reply."""

    recorded: bool


class ChatHistoryResponse(CamelModel):
    """Response schema for chat history."""

    messages: list[ChatMessageResponse]
    count: int = Field(description="Number of messages returned")
