"""
Database connection management.

Provides the async SQLAlchemy engine, session factory, and FastAPI
dependency for database session injection. Engine and factory are built
once per process; background work (corpus queries, analytics writes)
opens its own sessions from the same factory.

Dependencies: sqlalchemy, chat_engine.configs
System role: Database connection lifecycle management
"""

from functools import lru_cache
from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import AsyncAdaptedQueuePool

from chat_engine.configs import get_settings


def _sqlite_on_connect(dbapi_connection, connection_record) -> None:
    # Driver-level transaction handling off; SQLAlchemy emits BEGIN itself
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _sqlite_on_begin(conn) -> None:
    conn.exec_driver_sql("BEGIN")


def configure_sqlite_engine(engine: AsyncEngine) -> AsyncEngine:
    """
    Make an SQLite engine behave like the production store.

    Enables foreign keys so message rows cascade with their session, and
    hands transaction control to SQLAlchemy so SAVEPOINTs (used by session
    creation) work under the sqlite3 driver.

    Args:
        engine: Async engine on an SQLite URL

    Returns:
        AsyncEngine: The same engine
    """
    event.listen(engine.sync_engine, "connect", _sqlite_on_connect)
    event.listen(engine.sync_engine, "begin", _sqlite_on_begin)
    return engine


@lru_cache
def get_async_engine() -> AsyncEngine:
    """
    Create async SQLAlchemy engine with connection pooling.

    pool_pre_ping=True verifies connections before use to detect
    stale/broken connections early. SQLite URLs keep the dialect's
    default pool since sizing options do not apply.

    Returns:
        AsyncEngine: Configured async SQLAlchemy engine

    Usage:
        engine = get_async_engine()
        async with engine.connect() as conn:
            result = await conn.execute(text("SELECT 1"))
    """
    db_config = get_settings().database

    if db_config.is_sqlite:
        return configure_sqlite_engine(
            create_async_engine(db_config.async_database_url, echo=db_config.echo_sql)
        )

    return create_async_engine(
        db_config.async_database_url,
        echo=db_config.echo_sql,
        poolclass=AsyncAdaptedQueuePool,
        pool_size=db_config.pool_size,
        max_overflow=db_config.max_overflow,
        pool_timeout=db_config.pool_timeout,
        pool_pre_ping=True,
    )


@lru_cache
def get_async_session_factory() -> async_sessionmaker[AsyncSession]:
    """
    Create async session factory for database operations.

    autoflush=False and expire_on_commit=False give explicit transaction
    control and keep loaded attributes usable after commit.

    Returns:
        async_sessionmaker: Async session factory

    Usage:
        SessionFactory = get_async_session_factory()
        async with SessionFactory() as session:
            session.add(obj)
            await session.commit()
    """
    return async_sessionmaker(
        bind=get_async_engine(),
        autoflush=False,
        expire_on_commit=False,
    )


async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency for async database session injection with automatic cleanup.

    Creates a new async database session for each request and ensures it's closed
    after the route completes, even if exceptions occur.

    Yields:
        AsyncSession: Async SQLAlchemy database session (scoped to request lifetime)
    """
    SessionFactory = get_async_session_factory()
    async with SessionFactory() as session:
        yield session


async def dispose_engine() -> None:
    """Close pooled connections at application shutdown."""
    if get_async_engine.cache_info().currsize:
        await get_async_engine().dispose()


async def init_db() -> None:
    """
    Create missing tables (development and first deploys).

    Usage:
        await init_db()  # idempotent, existing tables are left as they are
    """
    from chat_engine.boundary.db import models  # noqa: F401  registers tables
    from chat_engine.boundary.db.base import Base

    async with get_async_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
