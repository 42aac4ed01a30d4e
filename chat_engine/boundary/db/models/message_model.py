"""
Chat message ORM model.

Dependencies: sqlalchemy, chat_engine.boundary.db.base
System role: Ordered, immutable conversation history
"""

import enum
import uuid

from sqlalchemy import ForeignKey, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from chat_engine.boundary.db.base import Base, CreatedAtMixin


class MessageRole(str, enum.Enum):
    """Author of a chat message."""

    USER = "user"
    ASSISTANT = "assistant"


class ChatMessageModel(Base, CreatedAtMixin):
    """
    Single message within a conversation session.

    Messages are never updated. Ordering within a session is by the
    server-assigned created_at, with the serial id breaking ties between
    messages stored in the same clock tick.

    Attributes:
        id: Serial primary key (insertion order)
        session_id: Owning session (cascade delete)
        role: 'user' or 'assistant'
        content: Non-empty message text
        created_at: Server-assigned UTC timestamp
    """

    __tablename__ = "chat_messages"
    __table_args__ = (
        Index("ix_chat_messages_session_created", "session_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("conversation_sessions.id", ondelete="CASCADE"),
        nullable=False,
    )
    role: Mapped[str] = mapped_column(String(16), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)

    session = relationship("ConversationSessionModel", back_populates="messages")
