"""
Session API endpoints.

Routes:
- GET /chat/sessions - List recent sessions
- DELETE /chat/sessions/{id} - Delete session (messages cascade, analytics kept)

Dependencies: chat_engine.application.services.session_service, chat_engine.models
System role: Session management HTTP API
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from chat_engine.api.deps import get_session_service
from chat_engine.application.services.session_service import SessionService
from chat_engine.models.session import SessionResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat/sessions", tags=["sessions"])


@router.get("", response_model=list[SessionResponse])
async def list_sessions(
    limit: int = Query(default=10, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    session_service: SessionService = Depends(get_session_service),
) -> list[SessionResponse]:
    """
    List sessions, most recently active first.

    Args:
        limit: Maximum number of sessions (default 10)
        offset: Number to skip (default 0)
        session_service: Injected SessionService

    Returns:
        list[SessionResponse]: Sessions
    """
    sessions = await session_service.get_all_sessions(limit=limit, offset=offset)
    return [SessionResponse(**session) for session in sessions]


@router.delete("/{session_id}", status_code=204)
async def delete_session(
    session_id: UUID,
    session_service: SessionService = Depends(get_session_service),
) -> None:
    """
    Delete session by ID.

    Raises:
        SessionNotFoundError: 404 when the session does not exist
    """
    await session_service.delete_session(session_id)
