"""API-specific dependencies."""

from .dependencies import (
    get_analytics_recorder,
    get_chat_service,
    get_search_engine,
    get_service_cache,
    get_session_service,
    get_settings_dependency,
)

__all__ = [
    "get_analytics_recorder",
    "get_chat_service",
    "get_search_engine",
    "get_service_cache",
    "get_session_service",
    "get_settings_dependency",
]
