"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, UUIDMixin, TimestampMixin, CreatedAtMixin: Model building blocks
  - get_async_engine(), get_async_session_factory(), get_async_db(): Async connection management
  - ConversationSessionModel, ChatMessageModel, ContentItemModel, ChatAnalyticsModel
  - *_crud: CRUD operation singletons

Dependencies: sqlalchemy, chat_engine.configs
System role: Database adapter for sessions, messages, corpus and analytics
"""

from chat_engine.boundary.db.base import Base, CreatedAtMixin, TimestampMixin, UUIDMixin
from chat_engine.boundary.db.connection import (
    configure_sqlite_engine,
    dispose_engine,
    get_async_db,
    init_db,
    get_async_engine,
    get_async_session_factory,
)
from chat_engine.boundary.db.models import (
    ChatAnalyticsModel,
    ChatMessageModel,
    ContentItemModel,
    ConversationSessionModel,
    MessageRole,
)
from chat_engine.boundary.db.CRUD import (
    BaseCRUD,
    chat_analytics_crud,
    chat_message_crud,
    content_item_crud,
    conversation_session_crud,
)

__all__ = [
    # Base classes
    "Base",
    "CreatedAtMixin",
    "TimestampMixin",
    "UUIDMixin",
    # Connection
    "configure_sqlite_engine",
    "dispose_engine",
    "get_async_db",
    "init_db",
    "get_async_engine",
    "get_async_session_factory",
    # Models
    "ConversationSessionModel",
    "ChatMessageModel",
    "MessageRole",
    "ContentItemModel",
    "ChatAnalyticsModel",
    # CRUD
    "BaseCRUD",
    "conversation_session_crud",
    "chat_message_crud",
    "content_item_crud",
    "chat_analytics_crud",
]
