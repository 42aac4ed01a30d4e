"""Service orchestrators."""

from .analytics_service import AnalyticsRecorder
from .chat_service import ChatService, TurnResult, TurnState
from .session_service import SessionService

__all__ = [
    "AnalyticsRecorder",
    "ChatService",
    "SessionService",
    "TurnResult",
    "TurnState",
]
