"""
Conversation session CRUD operations.

Dependencies: sqlalchemy, chat_engine.boundary.db.models
System role: Session persistence operations
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from chat_engine.boundary.db.base import utc_now
from chat_engine.boundary.db.CRUD.base_crud import BaseCRUD
from chat_engine.boundary.db.models.session_model import ConversationSessionModel


class ConversationSessionCRUD(BaseCRUD[ConversationSessionModel]):
    """
    CRUD operations for ConversationSessionModel.

    Extends BaseCRUD with lookups by session key and recency ordering.
    """

    def __init__(self) -> None:
        """Initialize ConversationSessionCRUD with ConversationSessionModel."""
        super().__init__(ConversationSessionModel)

    async def get_by_key(
        self,
        session: AsyncSession,
        session_key: str,
    ) -> ConversationSessionModel | None:
        """
        Retrieve a session by its client-held key.

        Args:
            session: Async database session
            session_key: Opaque client session key

        Returns:
            ConversationSessionModel if found, None otherwise
        """
        stmt = select(ConversationSessionModel).where(
            ConversationSessionModel.session_key == session_key
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_recent(
        self,
        session: AsyncSession,
        limit: int | None = None,
        offset: int = 0,
    ) -> Sequence[ConversationSessionModel]:
        """
        Retrieve sessions, most recently active first.

        Args:
            session: Async database session
            limit: Maximum number of sessions to return
            offset: Number of sessions to skip

        Returns:
            Sequence of ConversationSessionModel
        """
        stmt = (
            select(ConversationSessionModel)
            .order_by(ConversationSessionModel.updated_at.desc())
            .offset(offset)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def touch(self, session: AsyncSession, id: UUID) -> None:
        """Bump updated_at after a message is appended."""
        stmt = (
            update(ConversationSessionModel)
            .where(ConversationSessionModel.id == id)
            .values(updated_at=utc_now())
        )
        await session.execute(stmt)

    async def set_title_if_missing(
        self,
        session: AsyncSession,
        id: UUID,
        title: str,
    ) -> bool:
        """
        Set the session title unless one is already stored.

        Args:
            session: Async database session
            id: Session UUID
            title: Title to store

        Returns:
            True if the title was written
        """
        stmt = (
            update(ConversationSessionModel)
            .where(ConversationSessionModel.id == id)
            .where(ConversationSessionModel.title.is_(None))
            .values(title=title)
        )
        result = await session.execute(stmt)
        return result.rowcount > 0


conversation_session_crud = ConversationSessionCRUD()
