"""
Dependency injection container.

Factory functions for FastAPI dependencies. Request-scoped services get
the request's database session; the search engine, embedder and
analytics recorder are process-wide and cached in ServiceCache.

Dependencies: chat_engine.configs, chat_engine.application, chat_engine.boundary
System role: DI container for service injection
"""

import logging

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from chat_engine.application.services import AnalyticsRecorder, ChatService, SessionService
from chat_engine.boundary.db import get_async_db, get_async_session_factory
from chat_engine.configs import Settings, get_settings
from chat_engine.core.retriever import HybridSearchEngine

logger = logging.getLogger(__name__)


class ServiceCache:
    """Container for cached service instances."""

    def __init__(self):
        self._embedder = None
        self._search_engine = None
        self._analytics = None

    @property
    def embedder(self):
        """
        Get cached query embedder, None when the provider cannot be built.

        A provider that fails to initialize (missing package or key) leaves
        the engine running in lexical-only degraded mode.
        """
        if self._embedder is None:
            from chat_engine.boundary.vdb.embeddings_factory import get_embeddings
            from chat_engine.boundary.vdb.query_embedder import QueryEmbedder

            embedding_settings = get_settings().embeddings
            try:
                embeddings = get_embeddings(embedding_settings)
            except Exception as e:
                logger.warning(
                    f"{__name__}:embedder - Embedding provider unavailable, vector search "
                    f"disabled: {type(e).__name__}: {e}"
                )
                return None
            self._embedder = QueryEmbedder(
                embeddings,
                dimensions=embedding_settings.dimensions,
                timeout=embedding_settings.timeout,
            )
        return self._embedder

    @property
    def search_engine(self) -> HybridSearchEngine:
        """Get cached hybrid search engine."""
        if self._search_engine is None:
            from chat_engine.boundary.vdb.corpus_store import CorpusStore

            self._search_engine = HybridSearchEngine(
                corpus_store=CorpusStore(get_async_session_factory()),
                embedder=self.embedder,
                default_content_types=get_settings().chat.content_types,
            )
        return self._search_engine

    @property
    def analytics(self) -> AnalyticsRecorder:
        """Get cached analytics recorder."""
        if self._analytics is None:
            self._analytics = AnalyticsRecorder(get_async_session_factory())
        return self._analytics

    def clear(self) -> None:
        """Clear all cached instances."""
        self._embedder = None
        self._search_engine = None
        self._analytics = None


# Global service cache
_service_cache = ServiceCache()


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    return _service_cache


def get_settings_dependency() -> Settings:
    """Get settings singleton."""
    return get_settings()


def get_search_engine() -> HybridSearchEngine:
    """Get the shared hybrid search engine."""
    return get_service_cache().search_engine


def get_analytics_recorder() -> AnalyticsRecorder:
    """Get the shared analytics recorder."""
    return get_service_cache().analytics


def get_session_service(
    db: AsyncSession = Depends(get_async_db),
    settings: Settings = Depends(get_settings_dependency),
) -> SessionService:
    """
    Get session service instance.

    Args:
        db: Async database session (injected via Depends)
        settings: Application settings

    Returns:
        SessionService: Session service instance
    """
    return SessionService(db=db, settings=settings.chat)


def get_chat_service(
    db: AsyncSession = Depends(get_async_db),
    settings: Settings = Depends(get_settings_dependency),
    search_engine: HybridSearchEngine = Depends(get_search_engine),
    analytics: AnalyticsRecorder = Depends(get_analytics_recorder),
) -> ChatService:
    """
    Get chat service instance.

    Args:
        db: Async database session (injected via Depends)
        settings: Application settings
        search_engine: Shared hybrid search engine
        analytics: Shared analytics recorder

    Returns:
        ChatService: Conversation orchestrator for this request
    """
    return ChatService(
        db=db,
        search_engine=search_engine,
        analytics=analytics,
        settings=settings.chat,
    )
