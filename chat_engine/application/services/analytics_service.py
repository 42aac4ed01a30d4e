"""
Analytics recorder.

Persists one query/response/result-set record per turn as a background
task. The caller never waits for the write: record() schedules it and
returns at once.

Guarantees:
- writes use their own database session, never the request's
- a failed write is logged and dropped, never retried
- tasks are held here, not by the request, so cancelling a request does
  not cancel its analytics write
- drain() bounds how long shutdown waits for pending writes

Dependencies: sqlalchemy, chat_engine.boundary.db
System role: Fire-and-forget analytics persistence
"""

import asyncio
import logging
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from chat_engine.boundary.db.CRUD.analytics_crud import chat_analytics_crud
from chat_engine.boundary.vdb.search_schemas import SearchResult
from chat_engine.core.exceptions import AnalyticsWriteFailedError
from chat_engine.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)


class AnalyticsRecorder:
    """Best-effort, non-blocking analytics writer."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """
        Initialize recorder.

        Args:
            session_factory: Factory used to open one session per write
        """
        self._session_factory = session_factory
        self._pending: set[asyncio.Task] = set()

    @property
    def pending_count(self) -> int:
        """Writes scheduled but not finished."""
        return len(self._pending)

    def record(
        self,
        query: str,
        response: str | None,
        session_id: UUID | None,
        results: Sequence[SearchResult],
        metadata: dict[str, Any] | None = None,
        user_id: str | None = None,
        enabled: bool = True,
    ) -> asyncio.Task | None:
        """
        Schedule an analytics write and return immediately.

        Must be called from a running event loop. The payload is captured
        now, so later changes to the caller's objects do not leak into it.

        Args:
            query: Visitor query
            response: Assistant reply, None for retrieval-stage records
            session_id: Session of the turn, if any
            results: Search results of the turn
            metadata: Timing, flags and other turn details
            user_id: Optional authenticated user
            enabled: False makes this a no-op (persistConversations off)

        Returns:
            asyncio.Task | None: The scheduled write, None when disabled
        """
        if not enabled:
            logger.debug(f"{__name__}:record - Skipped, conversation persistence disabled")
            return None

        payload = {
            "query": query,
            "response": response,
            "session_id": session_id,
            "user_id": user_id,
            "search_results": [r.model_dump(mode="json") for r in results],
            "analytics_metadata": dict(metadata or {}),
        }
        task = asyncio.create_task(self._write(payload), name="chat-analytics-write")
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _write(self, payload: dict[str, Any]) -> bool:
        """Insert one record. Never raises except on cancellation."""
        try:
            async with self._session_factory() as db:
                await chat_analytics_crud.create(db, **payload)
                await db.commit()
        except Exception as e:
            failure = AnalyticsWriteFailedError(
                "Analytics write dropped",
                details={"session_id": str(payload.get("session_id"))},
            )
            log_exception_with_context(
                logger,
                f"{__name__}:_write - {failure}",
                e,
                level=logging.WARNING,
                session_id=payload.get("session_id"),
            )
            return False
        return True

    async def drain(self, timeout: float) -> int:
        """
        Wait for pending writes, at most ``timeout`` seconds.

        Writes still running after the timeout are cancelled and lost.

        Args:
            timeout: Seconds to wait

        Returns:
            int: Number of writes abandoned
        """
        if not self._pending:
            return 0

        pending = set(self._pending)
        logger.info(f"{__name__}:drain - Waiting for {len(pending)} analytics writes")
        _, not_done = await asyncio.wait(pending, timeout=timeout)
        for task in not_done:
            task.cancel()
        if not_done:
            logger.warning(
                f"{__name__}:drain - Abandoned {len(not_done)} analytics writes after {timeout}s"
            )
        return len(not_done)
