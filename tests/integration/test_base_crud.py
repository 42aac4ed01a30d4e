"""
Integration tests for BaseCRUD and model-specific CRUD classes.

Runs the generic operations against SQLite, including a model keyed by a
non-``id`` primary key.

System role: Verification of persistence building blocks
"""

import uuid

import pytest

from chat_engine.boundary.db.CRUD import (
    chat_message_crud,
    content_item_crud,
    conversation_session_crud,
)
from chat_engine.boundary.db.models import ConversationSessionModel


class TestBaseCRUD:
    """Test suite for generic CRUD operations."""

    @pytest.mark.asyncio
    async def test_create_should_assign_id_and_timestamps(self, test_async_db) -> None:
        """Test create flushes and returns a refreshed row."""
        # Act
        session = await conversation_session_crud.create(test_async_db, session_key="k1")

        # Assert
        assert isinstance(session, ConversationSessionModel)
        assert isinstance(session.id, uuid.UUID)
        assert session.created_at is not None
        assert session.updated_at is not None

    @pytest.mark.asyncio
    async def test_get_by_id_should_return_none_when_missing(self, test_async_db) -> None:
        """Test lookup of an unknown primary key."""
        assert await conversation_session_crud.get_by_id(test_async_db, uuid.uuid4()) is None

    @pytest.mark.asyncio
    async def test_delete_should_report_row_match(self, test_async_db) -> None:
        """Test delete_by_id returns whether a row matched."""
        # Arrange
        session = await conversation_session_crud.create(test_async_db, session_key="k1")

        # Act
        deleted = await conversation_session_crud.delete_by_id(test_async_db, session.id)
        deleted_again = await conversation_session_crud.delete_by_id(test_async_db, session.id)

        # Assert
        assert deleted is True
        assert deleted_again is False
        assert await conversation_session_crud.exists(test_async_db, session.id) is False

    @pytest.mark.asyncio
    async def test_get_by_id_should_use_custom_primary_key(self, test_async_db) -> None:
        """Test content items are fetched by their serial ``seq`` key."""
        # Arrange
        first = await content_item_crud.create(test_async_db, content_id="c0", content_type="project", title="Item 0")
        second = await content_item_crud.create(test_async_db, content_id="c1", content_type="project", title="Item 1")

        # Act
        found = await content_item_crud.get_by_id(test_async_db, second.seq)

        # Assert
        assert second.seq > first.seq
        assert found.content_id == "c1"
        assert await content_item_crud.exists(test_async_db, first.seq) is True


class TestMessageCRUD:
    """Test suite for ChatMessageCRUD."""

    @pytest.mark.asyncio
    async def test_get_recent_should_return_newest_first(self, test_async_db) -> None:
        """Test the newest messages come first and are limited."""
        # Arrange
        session = await conversation_session_crud.create(test_async_db, session_key="k1")
        for i in range(3):
            await chat_message_crud.create(
                test_async_db, session_id=session.id, role="user", content=f"m{i}"
            )

        # Act
        recent = await chat_message_crud.get_recent(test_async_db, session.id, limit=2)

        # Assert
        assert [m.content for m in recent] == ["m2", "m1"]


class TestContentCRUD:
    """Test suite for ContentItemCRUD."""

    @pytest.mark.asyncio
    async def test_get_by_title_should_match_whole_title_of_projects_only(self, test_async_db) -> None:
        """Test the title lookup ignores case and other content types."""
        # Arrange
        await content_item_crud.create(test_async_db, content_id="about", content_type="general_info", title="Project X")
        await content_item_crud.create(test_async_db, content_id="project-x", content_type="project", title="Project X")

        # Act
        found = await content_item_crud.get_by_title(test_async_db, "  project x ")
        partial = await content_item_crud.get_by_title(test_async_db, "project")

        # Assert
        assert found.content_id == "project-x"
        assert partial is None

    @pytest.mark.asyncio
    async def test_match_terms_should_return_empty_without_terms(self, test_async_db) -> None:
        """Test no terms short-circuits to an empty list."""
        assert await content_item_crud.match_terms(test_async_db, []) == []

    @pytest.mark.asyncio
    async def test_get_embedded_should_skip_rows_without_embedding(self, test_async_db) -> None:
        """Test rows with a NULL embedding are not vector candidates."""
        # Arrange
        await content_item_crud.create(
            test_async_db, content_id="a", content_type="project", embedding=[1.0, 0.0]
        )
        await content_item_crud.create(test_async_db, content_id="b", content_type="project")

        # Act
        items = await content_item_crud.get_embedded(test_async_db, ["project"])

        # Assert
        assert [item.content_id for item in items] == ["a"]
