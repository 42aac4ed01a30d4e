"""
Chat message CRUD operations.

Messages are append-only; there is no update path.

Dependencies: sqlalchemy, chat_engine.boundary.db.models
System role: Chat message persistence
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from chat_engine.boundary.db.CRUD.base_crud import BaseCRUD
from chat_engine.boundary.db.models.message_model import ChatMessageModel


class ChatMessageCRUD(BaseCRUD[ChatMessageModel]):
    """CRUD operations for ChatMessageModel."""

    def __init__(self) -> None:
        """Initialize ChatMessageCRUD with ChatMessageModel."""
        super().__init__(ChatMessageModel)

    async def get_recent(
        self,
        session: AsyncSession,
        session_id: UUID,
        limit: int,
    ) -> Sequence[ChatMessageModel]:
        """
        Retrieve the newest messages of a session, newest first.

        Args:
            session: Async database session
            session_id: Owning session UUID
            limit: Maximum number of messages

        Returns:
            Sequence of ChatMessageModel ordered newest to oldest
        """
        stmt = (
            select(ChatMessageModel)
            .where(ChatMessageModel.session_id == session_id)
            .order_by(ChatMessageModel.created_at.desc(), ChatMessageModel.id.desc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return result.scalars().all()


chat_message_crud = ChatMessageCRUD()
