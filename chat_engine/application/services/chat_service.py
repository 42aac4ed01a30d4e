"""
Chat service: the conversation orchestrator.

Sequences one visitor turn through the engine:

    RECEIVED -> SESSION_RESOLVED -> SEARCHED -> ASSEMBLED -> RECORDED -> RETURNED

- RECEIVED and SESSION_RESOLVED can fail the turn (bad input, store down)
- SEARCHED can degrade to lexical-only but only aborts on CriticalFailure
- ASSEMBLED is pure
- RECORDED schedules analytics and never blocks or fails the turn

The engine prepares context for the language-model client; it never
calls the model. The reply the client produces comes back through
record_reply().

Dependencies: chat_engine.core, chat_engine.application.services, chat_engine.boundary
System role: Chat service orchestration layer
"""

import enum
import logging
import time
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from chat_engine.application.services.analytics_service import AnalyticsRecorder
from chat_engine.application.services.session_service import SessionService
from chat_engine.boundary.db.models.message_model import ChatMessageModel, MessageRole
from chat_engine.boundary.vdb.search_schemas import SearchOutcome, SearchResult
from chat_engine.configs.chat import ChatSettings
from chat_engine.core.context_assembler import ContextAssembler, find_relevant_project
from chat_engine.core.exceptions import InvalidInputError, StoreUnavailableError
from chat_engine.core.query_intent import QueryIntent, analyze_query_intent
from chat_engine.core.retriever import HybridSearchEngine
from chat_engine.models.chat import ChatContext, ChatSystemConfig
from chat_engine.observability.correlation import get_correlation_id
from chat_engine.observability.log_utils import log_with_context

logger = logging.getLogger(__name__)


class TurnState(str, enum.Enum):
    """Stages of one conversation turn."""

    RECEIVED = "received"
    SESSION_RESOLVED = "session_resolved"
    SEARCHED = "searched"
    ASSEMBLED = "assembled"
    RECORDED = "recorded"
    RETURNED = "returned"


@dataclass(frozen=True)
class TurnResult:
    """Everything the caller needs to run the generator for one turn."""

    session_id: UUID | None
    context: list[ChatContext]
    history: list[ChatMessageModel]
    degraded: bool
    formatted_context: str = ""
    results: list[SearchResult] = field(default_factory=list)
    intent: QueryIntent | None = None
    search_metrics: dict[str, Any] | None = None
    message_persisted: bool = False
    relevant_project: dict[str, Any] | None = None


class ChatService:
    """
    Conversation orchestrator.

    One instance serves one request: it holds the request's database
    session. The search engine and analytics recorder are shared.
    """

    def __init__(
        self,
        db: AsyncSession,
        search_engine: HybridSearchEngine,
        analytics: AnalyticsRecorder,
        settings: ChatSettings | None = None,
        assembler: ContextAssembler | None = None,
    ) -> None:
        """
        Initialize chat service.

        Args:
            db: AsyncSession for session and history operations
            search_engine: Hybrid search engine
            analytics: Background analytics recorder
            settings: Chat settings holding per-call defaults
            assembler: Context assembler
        """
        self.db = db
        self.search_engine = search_engine
        self.analytics = analytics
        self.settings = settings or ChatSettings()
        self.assembler = assembler or ContextAssembler()
        self.session_service = SessionService(db=db, settings=self.settings)

    def build_config(self, overrides: dict[str, Any] | None = None) -> ChatSystemConfig:
        """
        Per-call config from process defaults plus caller overrides.

        Raises:
            InvalidInputError: An override is invalid
        """
        try:
            return ChatSystemConfig.from_settings(self.settings, **(overrides or {}))
        except ValueError as e:
            raise InvalidInputError(
                "Invalid chat configuration",
                field="config",
                details={"errors": str(e)},
            ) from e

    def validate_query(self, query_text: str | None) -> str:
        """
        Reject empty or oversized queries before any I/O.

        Raises:
            InvalidInputError: Query missing, blank or too long
        """
        if query_text is None or not isinstance(query_text, str) or not query_text.strip():
            raise InvalidInputError("Query must not be empty", field="query")
        query = query_text.strip()
        if len(query) > self.settings.max_query_length:
            raise InvalidInputError(
                f"Query exceeds {self.settings.max_query_length} characters",
                field="query",
            )
        return query

    async def handle_turn(
        self,
        session_key: str | None,
        query_text: str | None,
        config: ChatSystemConfig | None = None,
    ) -> TurnResult:
        """
        Run one conversation turn and return the assembled context.

        Flow:
        1. Validate query and session key
        2. Resolve (or, when not persisting, look up) the session and read history
        3. Detect a named project, then hybrid search
        4. Assemble context and pick the project the turn is about
        5. Store the user message, titling the session on its first prompt
        6. Schedule analytics without waiting

        Args:
            session_key: Client session key
            query_text: Visitor question
            config: Per-call configuration, process defaults if None

        Returns:
            TurnResult: Context, trimmed history, session id and degraded flag

        Raises:
            InvalidInputError: Bad query or session key
            StoreUnavailableError: Session store unreachable
            CriticalFailureError: Lexical search failed
        """
        started = time.perf_counter()
        config = config or self.build_config()
        state = TurnState.RECEIVED

        query = self.validate_query(query_text)
        key = self.session_service.validate_session_key(session_key)
        logger.info(f"{__name__}:handle_turn - {state.value} query_len={len(query)}")

        if config.persist_conversations:
            session_id = await self.session_service.resolve_session(key)
        else:
            session_id = await self.session_service.lookup_session(key)
        history = (
            await self.session_service.history(session_id, config.history_limit)
            if session_id is not None
            else []
        )
        state = TurnState.SESSION_RESOLVED
        logger.info(
            f"{__name__}:handle_turn - {state.value} session_id={session_id} history={len(history)}"
        )

        intent = analyze_query_intent(query, self.settings.owner_name)
        outcome = await self.search_engine.search(
            query,
            threshold=config.similarity_threshold,
            max_results=max(self.settings.match_count, config.max_context_items),
            use_hybrid=config.use_hybrid_search,
            project_name=intent.lookup_name,
        )
        state = TurnState.SEARCHED
        logger.info(
            f"{__name__}:handle_turn - {state.value} results={len(outcome.results)} "
            f"degraded={outcome.degraded}"
        )

        assembled = self.assembler.assemble(outcome.results, history, config)
        state = TurnState.ASSEMBLED
        relevant_project = find_relevant_project(outcome.results, intent)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)

        message_persisted = False
        if config.persist_conversations and session_id is not None:
            message_persisted = await self._store_user_message(session_id, query, first=not history)

        self.analytics.record(
            query=query,
            response=None,
            session_id=session_id,
            results=outcome.results,
            metadata=self._analytics_metadata(config, outcome, intent, elapsed_ms, stage="retrieval"),
            enabled=config.persist_conversations,
        )
        state = TurnState.RECORDED
        logger.debug(f"{__name__}:handle_turn - {state.value} message_persisted={message_persisted}")

        state = TurnState.RETURNED
        log_with_context(
            logger,
            logging.INFO,
            f"{__name__}:handle_turn - {state.value} elapsed_ms={elapsed_ms}",
            query=query,
            session_id=session_id,
            project_query=intent.is_project_query,
            degraded=outcome.degraded,
        )

        return TurnResult(
            session_id=session_id,
            context=assembled.context,
            history=assembled.history,
            degraded=outcome.degraded,
            formatted_context=assembled.formatted_context,
            results=outcome.results,
            intent=intent,
            search_metrics=self._search_metrics(outcome, elapsed_ms) if config.show_search_metrics else None,
            message_persisted=message_persisted,
            relevant_project=relevant_project,
        )

    async def record_reply(
        self,
        session_id: UUID,
        query: str,
        response: str,
        config: ChatSystemConfig | None = None,
        results: list[SearchResult] | None = None,
    ) -> bool:
        """
        Store the assistant reply generated downstream and record it.

        Args:
            session_id: Session UUID
            query: Visitor question the reply answers
            response: Assistant reply text
            config: Per-call configuration, process defaults if None
            results: Search results the reply was generated from

        Returns:
            bool: True if stored, False when persistence is disabled

        Raises:
            InvalidInputError: Empty or oversized query, or empty reply
            SessionNotFoundError: Unknown session
            StoreUnavailableError: Datastore unreachable
        """
        query = self.validate_query(query)
        config = config or self.build_config()
        if not config.persist_conversations:
            return False
        if response is None or not response.strip():
            raise InvalidInputError("Response must not be empty", field="response")

        await self.session_service.ensure_exists(session_id)
        await self.session_service.append_message(session_id, MessageRole.ASSISTANT.value, response)

        self.analytics.record(
            query=query,
            response=response,
            session_id=session_id,
            results=results or [],
            metadata={
                "stage": "reply",
                "model": config.model,
                "temperature": config.temperature,
                "correlation_id": get_correlation_id() or None,
            },
        )
        logger.info(f"{__name__}:record_reply - Stored reply for session_id={session_id}")
        return True

    async def get_history(self, session_id: UUID, limit: int = 50) -> list[ChatMessageModel]:
        """
        Chat history of an existing session.

        Raises:
            SessionNotFoundError: Unknown session
        """
        await self.session_service.ensure_exists(session_id)
        return await self.session_service.history(session_id, limit)

    async def _store_user_message(self, session_id: UUID, query: str, first: bool) -> bool:
        """Append the user message; a store failure is logged, not raised."""
        try:
            await self.session_service.append_message(session_id, MessageRole.USER.value, query)
            if first:
                await self.session_service.set_title_from_prompt(session_id, query)
        except StoreUnavailableError as e:
            logger.warning(
                f"{__name__}:_store_user_message - User message not stored for "
                f"session_id={session_id}: {e}"
            )
            return False
        return True

    @staticmethod
    def _analytics_metadata(
        config: ChatSystemConfig,
        outcome: SearchOutcome,
        intent: QueryIntent,
        elapsed_ms: float,
        stage: str,
    ) -> dict[str, Any]:
        return {
            "stage": stage,
            "degraded": outcome.degraded,
            "vector_error": outcome.vector_error,
            "strategies": list(outcome.strategies),
            "result_count": len(outcome.results),
            "elapsed_ms": elapsed_ms,
            "intent": intent.as_dict(),
            "model": config.model,
            "temperature": config.temperature,
            "similarity_threshold": config.similarity_threshold,
            "correlation_id": get_correlation_id() or None,
        }

    @staticmethod
    def _search_metrics(outcome: SearchOutcome, elapsed_ms: float) -> dict[str, Any]:
        return {
            "strategies": list(outcome.strategies),
            "result_count": len(outcome.results),
            "vector_error": outcome.vector_error,
            "elapsed_ms": elapsed_ms,
        }
