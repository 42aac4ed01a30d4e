"""
Database models package.

Exports:
  - ConversationSessionModel: Conversation session keyed by session_key
  - ChatMessageModel, MessageRole: Ordered session messages
  - ContentItemModel: Searchable portfolio corpus
  - ChatAnalyticsModel: Append-only analytics records

Dependencies: sqlalchemy, chat_engine.boundary.db.base
System role: Database model definitions for domain entities
"""

from chat_engine.boundary.db.models.analytics_model import ChatAnalyticsModel
from chat_engine.boundary.db.models.content_model import ContentItemModel
from chat_engine.boundary.db.models.message_model import ChatMessageModel, MessageRole
from chat_engine.boundary.db.models.session_model import ConversationSessionModel

__all__ = [
    "ConversationSessionModel",
    "ChatMessageModel",
    "MessageRole",
    "ContentItemModel",
    "ChatAnalyticsModel",
]
