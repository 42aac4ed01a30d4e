"""
Chat analytics ORM model.

Append-only audit of every retrieval and reply. session_id is a plain
column rather than a foreign key so records outlive their session.

Dependencies: sqlalchemy, chat_engine.boundary.db.base
System role: Observational conversation analytics
"""

import uuid
from typing import Any

from sqlalchemy import JSON, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from chat_engine.boundary.db.base import Base, CreatedAtMixin, UUIDMixin


class ChatAnalyticsModel(Base, UUIDMixin, CreatedAtMixin):
    """
    One query/response/result-set record.

    Attributes:
        id: UUID primary key
        query: Visitor query text
        response: Assistant reply, None for retrieval-stage records
        session_id: Session the turn belonged to (no FK, survives deletion)
        user_id: Optional authenticated user
        search_results: Raw ranked results as JSON
        analytics_metadata: Timing, degraded flag, intent, stage
        created_at: Record timestamp (UTC)
    """

    __tablename__ = "chat_analytics"

    query: Mapped[str] = mapped_column(Text, nullable=False)
    response: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)
    session_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        nullable=True,
        index=True,
    )
    user_id: Mapped[str | None] = mapped_column(String(255), nullable=True, default=None)
    search_results: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    analytics_metadata: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
