"""
Session domain models and schemas.

Dependencies: pydantic
System role: Session API contracts
"""

import uuid
from datetime import datetime

from pydantic import Field

from chat_engine.models.chat import CamelModel


class SessionLookupResponse(CamelModel):
    """Lookup-only result for a session key."""

    session_id: uuid.UUID | None = Field(description="Session ID, null if the key is unknown")


class SessionResponse(CamelModel):
    """Response schema for session listings."""

    id: uuid.UUID
    session_key: str
    title: str | None
    created_at: datetime
    updated_at: datetime
