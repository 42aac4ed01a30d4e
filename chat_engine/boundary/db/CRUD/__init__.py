"""
CRUD operations for database models.

Exports base CRUD class and model-specific CRUD implementations
with pre-instantiated singletons for direct use.

Usage:
    from chat_engine.boundary.db.CRUD import conversation_session_crud

    session = await conversation_session_crud.get_by_key(db, session_key)
"""

from chat_engine.boundary.db.CRUD.analytics_crud import ChatAnalyticsCRUD, chat_analytics_crud
from chat_engine.boundary.db.CRUD.base_crud import BaseCRUD
from chat_engine.boundary.db.CRUD.content_crud import ContentItemCRUD, content_item_crud
from chat_engine.boundary.db.CRUD.message_crud import ChatMessageCRUD, chat_message_crud
from chat_engine.boundary.db.CRUD.session_crud import (
    ConversationSessionCRUD,
    conversation_session_crud,
)

__all__ = [
    "BaseCRUD",
    "ConversationSessionCRUD",
    "conversation_session_crud",
    "ChatMessageCRUD",
    "chat_message_crud",
    "ContentItemCRUD",
    "content_item_crud",
    "ChatAnalyticsCRUD",
    "chat_analytics_crud",
]
