"""Chat API endpoints.

Routes:
- POST /chat/turn - Run one conversation turn and return assembled context
- GET /chat/session - Look a session up by key (never creates)
- GET /chat/history - Chat history of a session
- POST /chat/sessions/{session_id}/reply - Store the generated assistant reply

Errors are returned as ``{kind, message}`` by the handlers in
chat_engine.api.errors.

Dependencies: chat_engine.application.services.chat_service
System role: Conversation HTTP API
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from chat_engine.api.deps import get_chat_service, get_session_service
from chat_engine.application.services.chat_service import ChatService, TurnResult
from chat_engine.application.services.session_service import SessionService
from chat_engine.models.chat import (
    ChatHistoryResponse,
    ChatMessageResponse,
    ReplyRequest,
    ReplyResponse,
    SearchMetrics,
    TurnRequest,
    TurnResponse,
)
from chat_engine.models.session import SessionLookupResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])


def to_message_response(message) -> ChatMessageResponse:
    return ChatMessageResponse(
        role=message.role,
        content=message.content,
        created_at=message.created_at,
    )


def to_turn_response(result: TurnResult) -> TurnResponse:
    """Map a TurnResult onto the wire schema."""
    return TurnResponse(
        session_id=result.session_id,
        context=result.context,
        history=[to_message_response(m) for m in result.history],
        degraded=result.degraded,
        formatted_context=result.formatted_context,
        search_metrics=SearchMetrics(**result.search_metrics) if result.search_metrics else None,
        relevant_project=result.relevant_project,
    )


@router.post("/turn", response_model=TurnResponse)
async def chat_turn(
    request: TurnRequest,
    chat_service: ChatService = Depends(get_chat_service),
) -> TurnResponse:
    """Run one conversation turn.

    Flow:
    1. Build the per-call config from defaults plus request overrides
    2. Resolve session, search, assemble (ChatService.handle_turn)
    3. Return context, trimmed history, session id and degraded flag

    Raises:
        InvalidInputError: 400
        StoreUnavailableError: 503
        CriticalFailureError: 500
    """
    config = chat_service.build_config(request.config)
    result = await chat_service.handle_turn(request.session_key, request.query, config)
    return to_turn_response(result)


@router.get("/session", response_model=SessionLookupResponse)
async def lookup_session(
    session_key: str = Query(alias="sessionKey"),
    session_service: SessionService = Depends(get_session_service),
) -> SessionLookupResponse:
    """Return the session id for a key, or null. Never creates a session."""
    session_id = await session_service.lookup_session(session_key)
    return SessionLookupResponse(session_id=session_id)


@router.get("/history", response_model=ChatHistoryResponse)
async def get_chat_history(
    session_id: UUID = Query(alias="sessionId"),
    limit: int = Query(default=50, ge=1, le=500),
    chat_service: ChatService = Depends(get_chat_service),
) -> ChatHistoryResponse:
    """
    Get chat history for a session, oldest first.

    Args:
        session_id: Session UUID
        limit: Maximum number of most recent messages (default 50)
        chat_service: Injected ChatService

    Returns:
        ChatHistoryResponse: Messages with count
    """
    messages = await chat_service.get_history(session_id, limit)
    return ChatHistoryResponse(
        messages=[to_message_response(m) for m in messages],
        count=len(messages),
    )


@router.post(
    "/sessions/{session_id}/reply",
    response_model=ReplyResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def record_reply(
    session_id: UUID,
    request: ReplyRequest,
    chat_service: ChatService = Depends(get_chat_service),
) -> ReplyResponse:
    """Store the assistant reply the generator produced for a turn."""
    config = chat_service.build_config(request.config)
    recorded = await chat_service.record_reply(
        session_id=session_id,
        query=request.query,
        response=request.response,
        config=config,
    )
    return ReplyResponse(recorded=recorded)
