"""
Content corpus CRUD operations.

Read paths used by the corpus store: candidate rows for vector scoring and
keyword-matched rows for lexical scoring. Both return rows in corpus
insertion order.

Dependencies: sqlalchemy, chat_engine.boundary.db.models
System role: Corpus access for hybrid search
"""

from typing import Sequence

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from chat_engine.boundary.db.CRUD.base_crud import BaseCRUD
from chat_engine.boundary.db.models.content_model import ContentItemModel


class ContentItemCRUD(BaseCRUD[ContentItemModel]):
    """CRUD operations for ContentItemModel (keyed by seq)."""

    def __init__(self) -> None:
        """Initialize ContentItemCRUD with ContentItemModel."""
        super().__init__(ContentItemModel, pk_name="seq")

    async def get_embedded(
        self,
        session: AsyncSession,
        content_types: Sequence[str] | None = None,
    ) -> Sequence[ContentItemModel]:
        """
        Retrieve every item that carries an embedding.

        Args:
            session: Async database session
            content_types: Optional allow-list of content types

        Returns:
            Sequence of ContentItemModel in insertion order
        """
        stmt = select(ContentItemModel).where(ContentItemModel.embedding.is_not(None))
        if content_types:
            stmt = stmt.where(ContentItemModel.content_type.in_(list(content_types)))
        stmt = stmt.order_by(ContentItemModel.seq)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def match_terms(
        self,
        session: AsyncSession,
        terms: Sequence[str],
        content_types: Sequence[str] | None = None,
    ) -> Sequence[ContentItemModel]:
        """
        Retrieve items whose title, body or summary contains any term.

        Case-insensitive substring prefilter (ILIKE). Callers score the
        candidates on whole tokens, so "go" here also returns "Google".

        Args:
            session: Async database session
            terms: Lower-cased query terms
            content_types: Optional allow-list of content types

        Returns:
            Sequence of ContentItemModel in insertion order
        """
        if not terms:
            return []

        term_filters = []
        for term in terms:
            pattern = f"%{term}%"
            term_filters.extend([
                ContentItemModel.title.ilike(pattern),
                ContentItemModel.body.ilike(pattern),
                ContentItemModel.summary.ilike(pattern),
            ])

        stmt = select(ContentItemModel).where(or_(*term_filters))
        if content_types:
            stmt = stmt.where(ContentItemModel.content_type.in_(list(content_types)))
        stmt = stmt.order_by(ContentItemModel.seq)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_by_title(
        self,
        session: AsyncSession,
        title: str,
        content_type: str = "project",
    ) -> ContentItemModel | None:
        """First item of ``content_type`` whose title equals ``title``, ignoring case."""
        stmt = (
            select(ContentItemModel)
            .where(func.lower(ContentItemModel.title) == title.strip().lower())
            .where(ContentItemModel.content_type == content_type)
            .order_by(ContentItemModel.seq)
            .limit(1)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()


content_item_crud = ContentItemCRUD()
