"""
Session service orchestrator.

Maps client session keys to durable sessions and manages their ordered
message history.

Session creation is insert-or-fetch: look the key up, otherwise insert
inside a SAVEPOINT. If a concurrent request inserted the same key first,
the unique constraint rejects our row and the lookup runs again to return
the winner's id.

A create that fails on a busy store (SQLite "database is locked") is
rolled back and the lookup runs again, since the competing writer has
usually committed by then.

Lookups are retried once with backoff on datastore outages before
StoreUnavailableError propagates. An empty session is never fabricated.

Dependencies: sqlalchemy, tenacity, chat_engine.boundary.db
System role: Session use case orchestration
"""

import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from chat_engine.boundary.db.CRUD.message_crud import chat_message_crud
from chat_engine.boundary.db.CRUD.session_crud import conversation_session_crud
from chat_engine.boundary.db.errors import translate_store_errors
from chat_engine.boundary.db.models.message_model import ChatMessageModel, MessageRole
from chat_engine.configs.chat import ChatSettings
from chat_engine.core.exceptions import (
    InvalidInputError,
    SessionNotFoundError,
    StoreUnavailableError,
)

logger = logging.getLogger(__name__)

LOOKUP_ATTEMPTS = 2
CREATE_ATTEMPTS = 3
TITLE_MAX_CHARS = 30

_retry_store_lookup = retry(
    retry=retry_if_exception_type(StoreUnavailableError),
    stop=stop_after_attempt(LOOKUP_ATTEMPTS),
    wait=wait_exponential_jitter(initial=0.2, max=2, jitter=0.1),
    before_sleep=lambda retry_state: logger.warning(
        f"{__name__}:{retry_state.fn.__name__} - Retry "
        f"{retry_state.attempt_number}/{LOOKUP_ATTEMPTS} after store failure"
    ),
    reraise=True,
)

_retry_session_create = retry(
    retry=retry_if_exception_type(StoreUnavailableError),
    stop=stop_after_attempt(CREATE_ATTEMPTS),
    wait=wait_exponential_jitter(initial=0.05, max=0.5, jitter=0.05),
    before_sleep=lambda retry_state: logger.warning(
        f"{__name__}:resolve_session - Create attempt "
        f"{retry_state.attempt_number}/{CREATE_ATTEMPTS} hit a busy store, re-reading"
    ),
    reraise=True,
)


def derive_title(prompt: str) -> str:
    """Session title from the first prompt: 30 characters, then an ellipsis."""
    prompt = prompt.strip()
    if len(prompt) > TITLE_MAX_CHARS:
        return prompt[:TITLE_MAX_CHARS] + "..."
    return prompt


class SessionService:
    """Session service orchestrator."""

    def __init__(self, db: AsyncSession, settings: ChatSettings | None = None) -> None:
        """
        Initialize session service with async database session.

        Args:
            db: Async SQLAlchemy session
            settings: Chat settings (key length limit)
        """
        self.db = db
        self.settings = settings or ChatSettings()

    def validate_session_key(self, session_key: str | None) -> str:
        """
        Reject malformed session keys before any I/O.

        Args:
            session_key: Raw key from the client

        Returns:
            str: Key with surrounding whitespace removed

        Raises:
            InvalidInputError: Key missing, blank, too long or not printable
        """
        if session_key is None or not isinstance(session_key, str) or not session_key.strip():
            raise InvalidInputError("Session key is required", field="session_key")
        key = session_key.strip()
        if len(key) > self.settings.max_session_key_length:
            raise InvalidInputError(
                f"Session key exceeds {self.settings.max_session_key_length} characters",
                field="session_key",
            )
        if not key.isprintable():
            raise InvalidInputError("Session key contains control characters", field="session_key")
        return key

    @_retry_store_lookup
    async def _lookup_by_key(self, session_key: str) -> UUID | None:
        try:
            async with translate_store_errors("lookup_session"):
                session = await conversation_session_crud.get_by_key(self.db, session_key)
        except StoreUnavailableError:
            await self._rollback_quietly()
            raise
        return session.id if session else None

    async def lookup_session(self, session_key: str | None) -> UUID | None:
        """
        Look a session up by key without creating it.

        Args:
            session_key: Client session key

        Returns:
            UUID | None: Session ID, None if the key is unknown

        Raises:
            InvalidInputError: Malformed key
            StoreUnavailableError: Datastore unreachable after retry
        """
        key = self.validate_session_key(session_key)
        return await self._lookup_by_key(key)

    async def resolve_session(self, session_key: str | None) -> UUID:
        """
        Return the session for a key, creating it on first use.

        Safe under concurrent calls with the same key: at most one row is
        ever created and every caller gets the same id.

        Args:
            session_key: Client session key

        Returns:
            UUID: Session ID

        Raises:
            InvalidInputError: Malformed key
            StoreUnavailableError: Datastore unreachable after retry
        """
        key = self.validate_session_key(session_key)
        return await self._lookup_or_create(key)

    @_retry_session_create
    async def _lookup_or_create(self, key: str) -> UUID:
        existing = await self._lookup_by_key(key)
        if existing is not None:
            return existing

        try:
            async with translate_store_errors("create_session"):
                # SQLite cannot upgrade the lookup's read lock while another writer commits
                await self.db.rollback()
                async with self.db.begin_nested():
                    created = await conversation_session_crud.create(self.db, session_key=key)
                await self.db.commit()
        except IntegrityError:
            logger.info(
                f"{__name__}:resolve_session - Concurrent create for key, re-reading winner"
            )
            await self._rollback_quietly()
            winner = await self._lookup_by_key(key)
            if winner is None:
                raise StoreUnavailableError(
                    "Session key conflict but no session found on re-read",
                    operation="create_session",
                )
            return winner
        except StoreUnavailableError:
            await self._rollback_quietly()
            raise

        logger.info(f"{__name__}:resolve_session - Created session {created.id}")
        return created.id

    async def append_message(
        self,
        session_id: UUID,
        role: str,
        content: str,
    ) -> ChatMessageModel:
        """
        Append an immutable message to a session.

        Args:
            session_id: Session UUID
            role: 'user' or 'assistant'
            content: Non-empty message text

        Returns:
            ChatMessageModel: Stored message with server timestamp

        Raises:
            InvalidInputError: Empty content, unknown role or unknown session
            StoreUnavailableError: Datastore unreachable
        """
        if role not in {r.value for r in MessageRole}:
            raise InvalidInputError(f"Invalid role: {role}", field="role")
        if content is None or not content.strip():
            raise InvalidInputError("Message content must not be empty", field="content")

        try:
            async with translate_store_errors("append_message"):
                if not await conversation_session_crud.exists(self.db, session_id):
                    raise InvalidInputError(
                        f"Session {session_id} does not exist",
                        field="session_id",
                    )
                message = await chat_message_crud.create(
                    self.db,
                    session_id=session_id,
                    role=role,
                    content=content,
                )
                await conversation_session_crud.touch(self.db, session_id)
                await self.db.commit()
        except StoreUnavailableError:
            await self._rollback_quietly()
            raise

        return message

    @_retry_store_lookup
    async def history(self, session_id: UUID, limit: int) -> list[ChatMessageModel]:
        """
        Most recent ``limit`` messages of a session, oldest first.

        Args:
            session_id: Session UUID
            limit: Maximum messages returned

        Returns:
            list[ChatMessageModel]: Chronological window of at most ``limit`` messages

        Raises:
            StoreUnavailableError: Datastore unreachable after retry
        """
        if limit <= 0:
            return []
        try:
            async with translate_store_errors("history"):
                newest_first = await chat_message_crud.get_recent(self.db, session_id, limit)
        except StoreUnavailableError:
            await self._rollback_quietly()
            raise
        return list(reversed(newest_first))

    async def set_title_from_prompt(self, session_id: UUID, prompt: str) -> bool:
        """
        Title an untitled session after its first prompt.

        Args:
            session_id: Session UUID
            prompt: First user message

        Returns:
            bool: True if a title was written
        """
        async with translate_store_errors("set_title"):
            written = await conversation_session_crud.set_title_if_missing(
                self.db, session_id, derive_title(prompt)
            )
            await self.db.commit()
        return written

    async def get_session(self, session_id: UUID) -> dict:
        """
        Get session by ID.

        Raises:
            SessionNotFoundError: If session not found
        """
        async with translate_store_errors("get_session"):
            session = await conversation_session_crud.get_by_id(self.db, session_id)
        if not session:
            raise SessionNotFoundError(str(session_id))
        return self._to_dict(session)

    async def get_all_sessions(self, limit: int | None = 10, offset: int = 0) -> list[dict]:
        """
        List sessions, most recently active first.

        Args:
            limit: Maximum number of sessions to return
            offset: Number of sessions to skip

        Returns:
            list[dict]: Session dicts
        """
        async with translate_store_errors("list_sessions"):
            sessions = await conversation_session_crud.get_recent(
                self.db, limit=limit, offset=offset
            )
        return [self._to_dict(s) for s in sessions]

    async def delete_session(self, session_id: UUID) -> bool:
        """
        Delete a session and its messages. Analytics rows are kept.

        Raises:
            SessionNotFoundError: If session not found
        """
        async with translate_store_errors("delete_session"):
            deleted = await conversation_session_crud.delete_by_id(self.db, session_id)
            if not deleted:
                raise SessionNotFoundError(str(session_id))
            await self.db.commit()
        logger.info(f"{__name__}:delete_session - Deleted session {session_id}")
        return True

    async def ensure_exists(self, session_id: UUID) -> None:
        """Raise SessionNotFoundError unless the session is stored."""
        async with translate_store_errors("get_session"):
            found = await conversation_session_crud.exists(self.db, session_id)
        if not found:
            raise SessionNotFoundError(str(session_id))

    async def _rollback_quietly(self) -> None:
        try:
            await self.db.rollback()
        except (SQLAlchemyError, OSError) as e:
            logger.warning(f"{__name__}:_rollback_quietly - Rollback failed: {type(e).__name__}")

    @staticmethod
    def _to_dict(session) -> dict:
        return {
            "id": session.id,
            "session_key": session.session_key,
            "title": session.title,
            "created_at": session.created_at,
            "updated_at": session.updated_at,
        }

