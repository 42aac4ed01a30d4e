"""
Shared test fixtures and configuration for entire test suite.

Provides: SQLite async engine and sessions, corpus seeding, search result
builders, service mocks
Dependencies: pytest, sqlalchemy, aiosqlite
System role: Test infrastructure and fixture management
"""

import uuid
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest


@pytest.fixture
async def async_engine(tmp_path):
    """
    Create a file-backed SQLite async engine with all tables.

    A file (not :memory:) lets separate sessions use separate connections,
    the way the corpus store and analytics recorder do in production.

    Yields:
        AsyncEngine: Engine with the schema created (lazy imported to avoid settings issues)
    """
    from sqlalchemy.ext.asyncio import create_async_engine
    from chat_engine.boundary.db import models  # noqa: F401
    from chat_engine.boundary.db.base import Base
    from chat_engine.boundary.db.connection import configure_sqlite_engine

    engine = configure_sqlite_engine(
        create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'chat_engine_test.db'}")
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(async_engine):
    """
    Session factory bound to the test engine.

    Returns:
        async_sessionmaker: Same options as the production factory
    """
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    return async_sessionmaker(
        bind=async_engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )


@pytest.fixture
async def test_async_db(session_factory):
    """
    Async database session for one test.

    Yields:
        AsyncSession: Test database session with cleanup
    """
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def seed_content(session_factory):
    """
    Insert corpus items in order and commit.

    Returns:
        Callable: async seed(items) -> stored ContentItemModel rows, seq in insertion order
    """
    from chat_engine.boundary.db.CRUD.content_crud import content_item_crud

    async def seed(items: list[dict[str, Any]]) -> list[Any]:
        stored = []
        async with session_factory() as session:
            for item in items:
                stored.append(await content_item_crud.create(session, **item))
            await session.commit()
        return stored

    return seed


@pytest.fixture
def make_result():
    """
    Build SearchResult instances.

    Returns:
        Callable: make_result(content_id, similarity, match_type, content_type, corpus_position, **content)
    """
    from chat_engine.boundary.vdb.search_schemas import SearchResult

    def build(
        content_id: str,
        similarity: float,
        match_type: str = "vector",
        content_type: str = "project",
        corpus_position: int = 0,
        **content: Any,
    ) -> SearchResult:
        return SearchResult(
            content_id=content_id,
            content_type=content_type,
            similarity=similarity,
            content=content or {"title": content_id},
            metadata={"title": content.get("title", content_id)},
            match_type=match_type,
            corpus_position=corpus_position,
        )

    return build


@pytest.fixture
def sample_session_id() -> uuid.UUID:
    """Provide sample session UUID."""
    return uuid.uuid4()


@pytest.fixture
def mock_search_engine() -> MagicMock:
    """
    Create mock HybridSearchEngine.

    Returns:
        MagicMock: search() returns an empty, non-degraded outcome
    """
    from chat_engine.boundary.vdb.search_schemas import SearchOutcome

    engine = MagicMock()
    engine.search = AsyncMock(
        return_value=SearchOutcome(results=[], strategies=["vector", "lexical"])
    )
    return engine


@pytest.fixture
def mock_analytics() -> MagicMock:
    """
    Create mock AnalyticsRecorder.

    Returns:
        MagicMock: record() is synchronous, like the real recorder
    """
    recorder = MagicMock()
    recorder.record = MagicMock(return_value=None)
    recorder.drain = AsyncMock(return_value=0)
    return recorder
