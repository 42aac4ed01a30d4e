"""
API and domain schemas.

Request/response contracts and the per-call chat configuration.
"""

from chat_engine.models.chat import (
    ChatContext,
    ChatHistoryResponse,
    ChatMessageResponse,
    ChatSystemConfig,
    ReplyRequest,
    ReplyResponse,
    TurnRequest,
    TurnResponse,
)
from chat_engine.models.common import ErrorResponse
from chat_engine.models.session import SessionLookupResponse, SessionResponse

__all__ = [
    "ChatContext",
    "ChatHistoryResponse",
    "ChatMessageResponse",
    "ChatSystemConfig",
    "ErrorResponse",
    "ReplyRequest",
    "ReplyResponse",
    "SessionLookupResponse",
    "SessionResponse",
    "TurnRequest",
    "TurnResponse",
]
