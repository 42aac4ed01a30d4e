"""
Chat analytics CRUD operations.

Dependencies: sqlalchemy, chat_engine.boundary.db.models
System role: Analytics persistence (append-only)
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from chat_engine.boundary.db.CRUD.base_crud import BaseCRUD
from chat_engine.boundary.db.models.analytics_model import ChatAnalyticsModel


class ChatAnalyticsCRUD(BaseCRUD[ChatAnalyticsModel]):
    """CRUD operations for ChatAnalyticsModel. The engine only inserts and reads."""

    def __init__(self) -> None:
        """Initialize ChatAnalyticsCRUD with ChatAnalyticsModel."""
        super().__init__(ChatAnalyticsModel)

    async def get_for_session(
        self,
        session: AsyncSession,
        session_id: UUID,
    ) -> Sequence[ChatAnalyticsModel]:
        """
        Retrieve analytics records of one session, oldest first.

        Args:
            session: Async database session
            session_id: Session UUID

        Returns:
            Sequence of ChatAnalyticsModel
        """
        stmt = (
            select(ChatAnalyticsModel)
            .where(ChatAnalyticsModel.session_id == session_id)
            .order_by(ChatAnalyticsModel.created_at)
        )
        result = await session.execute(stmt)
        return result.scalars().all()


chat_analytics_crud = ChatAnalyticsCRUD()
