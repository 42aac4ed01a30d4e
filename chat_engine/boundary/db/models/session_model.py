"""
Conversation session ORM model.

Represents one visitor conversation, keyed by the opaque session key the
browser holds across page loads.

Dependencies: sqlalchemy, chat_engine.boundary.db.base
System role: Session persistence for conversation state
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from chat_engine.boundary.db.base import Base, TimestampMixin, UUIDMixin


class ConversationSessionModel(Base, UUIDMixin, TimestampMixin):
    """
    Conversation session keyed by a client-chosen session key.

    The unique constraint on session_key is the only concurrency guard for
    session creation: two racing creators cannot both insert. Messages are
    owned by the session and removed with it; analytics rows are not.

    Attributes:
        id: UUID primary key (auto-generated)
        session_key: Client-held opaque key (unique)
        title: Derived from the first user message, optional
        user_id: Authenticated user, when the site has one
        messages: ChatMessageModel rows (cascade delete)
        created_at: Session creation timestamp (UTC)
        updated_at: Bumped whenever a message is appended
    """

    __tablename__ = "conversation_sessions"

    session_key: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
        doc="Opaque client-supplied key, stable across a browser visit",
    )
    title: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        default=None,
        doc="Display title derived from the first prompt",
    )
    user_id: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        default=None,
    )

    messages = relationship(
        "ChatMessageModel",
        back_populates="session",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ChatMessageModel.id",
    )
