"""
Generic async CRUD over one mapped model.

Methods flush but never commit: the service that opened the session owns
the transaction, so a session create and its first message can share one.

Dependencies: sqlalchemy
System role: Foundation for all database CRUD operations
"""

from typing import Any, Generic, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from chat_engine.boundary.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseCRUD(Generic[ModelT]):
    """
    Generic base class for CRUD operations.

    Attributes:
        model: Mapped class operated on
        pk_name: Primary key attribute; content items are keyed by ``seq``
    """

    def __init__(self, model: type[ModelT], pk_name: str = "id") -> None:
        self.model = model
        self.pk_name = pk_name

    @property
    def pk(self):
        return getattr(self.model, self.pk_name)

    async def create(self, session: AsyncSession, **kwargs) -> ModelT:
        """
        Insert a row and return it with server and default values loaded.

        Args:
            session: Async database session
            **kwargs: Column values

        Returns:
            ModelT: Flushed and refreshed instance
        """
        instance = self.model(**kwargs)
        session.add(instance)
        await session.flush()
        await session.refresh(instance)
        return instance

    async def get_by_id(self, session: AsyncSession, id: Any) -> ModelT | None:
        result = await session.execute(select(self.model).where(self.pk == id))
        return result.scalar_one_or_none()

    async def delete_by_id(self, session: AsyncSession, id: Any) -> bool:
        """Returns False when no row has this key."""
        result = await session.execute(delete(self.model).where(self.pk == id))
        return result.rowcount > 0

    async def exists(self, session: AsyncSession, id: Any) -> bool:
        result = await session.execute(select(self.pk).where(self.pk == id))
        return result.scalar_one_or_none() is not None
