"""
Test suite for ChatService.

Tests turn orchestration: input validation, session resolution, search,
assembly, analytics scheduling and user-message persistence. The session
service, search engine and analytics recorder are mocked.

System role: Verification of chat service orchestration layer
"""

import uuid
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from chat_engine.application.services.chat_service import ChatService, TurnResult
from chat_engine.boundary.vdb.search_schemas import SearchOutcome
from chat_engine.configs.chat import ChatSettings
from chat_engine.core.exceptions import (
    CriticalFailureError,
    InvalidInputError,
    SessionNotFoundError,
    StoreUnavailableError,
)


@pytest.fixture
def mock_db_session() -> AsyncSession:
    """Provide mock async database session."""
    return AsyncMock(spec=AsyncSession)


@pytest.fixture
def settings() -> ChatSettings:
    """Provide chat settings with documented defaults."""
    return ChatSettings(_env_file=None, owner_name="Alex")


@pytest.fixture
def mock_session_service(sample_session_id: uuid.UUID) -> MagicMock:
    """Provide mock SessionService with an empty existing session."""
    service = MagicMock()
    service.validate_session_key = MagicMock(side_effect=lambda key: key.strip())
    service.resolve_session = AsyncMock(return_value=sample_session_id)
    service.lookup_session = AsyncMock(return_value=sample_session_id)
    service.history = AsyncMock(return_value=[])
    service.append_message = AsyncMock()
    service.set_title_from_prompt = AsyncMock(return_value=True)
    service.ensure_exists = AsyncMock()
    return service


@pytest.fixture
def chat_service(
    mock_db_session: AsyncSession,
    mock_search_engine: MagicMock,
    mock_analytics: MagicMock,
    mock_session_service: MagicMock,
    settings: ChatSettings,
) -> ChatService:
    """Provide ChatService with mocked dependencies."""
    service = ChatService(
        db=mock_db_session,
        search_engine=mock_search_engine,
        analytics=mock_analytics,
        settings=settings,
    )
    service.session_service = mock_session_service
    return service


def message(role: str, content: str) -> SimpleNamespace:
    return SimpleNamespace(role=role, content=content)


class TestChatServiceInit:
    """Test suite for ChatService initialization."""

    def test_init_should_store_dependencies(
        self,
        mock_db_session: AsyncSession,
        mock_search_engine: MagicMock,
        mock_analytics: MagicMock,
    ) -> None:
        """Test ChatService stores collaborators and builds its session service."""
        # Act
        service = ChatService(
            db=mock_db_session,
            search_engine=mock_search_engine,
            analytics=mock_analytics,
        )

        # Assert
        assert service.db is mock_db_session
        assert service.search_engine is mock_search_engine
        assert service.analytics is mock_analytics
        assert service.session_service.db is mock_db_session


class TestHandleTurnValidation:
    """Test suite for rejection before any I/O."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("query", [None, "", "   "])
    async def test_handle_turn_should_reject_empty_query(
        self,
        chat_service: ChatService,
        mock_session_service: MagicMock,
        mock_search_engine: MagicMock,
        query,
    ) -> None:
        """Test empty queries fail with InvalidInput and touch nothing."""
        # Act & Assert
        with pytest.raises(InvalidInputError) as exc_info:
            await chat_service.handle_turn("tab-key", query)

        assert exc_info.value.details["field"] == "query"
        mock_session_service.resolve_session.assert_not_called()
        mock_search_engine.search.assert_not_called()

    @pytest.mark.asyncio
    async def test_handle_turn_should_reject_oversized_query(self, chat_service: ChatService) -> None:
        """Test queries over the length limit are rejected."""
        with pytest.raises(InvalidInputError):
            await chat_service.handle_turn("tab-key", "x" * 4001)

    @pytest.mark.asyncio
    async def test_handle_turn_should_propagate_invalid_session_key(
        self,
        chat_service: ChatService,
        mock_session_service: MagicMock,
    ) -> None:
        """Test a malformed key aborts the turn."""
        # Arrange
        mock_session_service.validate_session_key.side_effect = InvalidInputError(
            "Session key is required", field="session_key"
        )

        # Act & Assert
        with pytest.raises(InvalidInputError):
            await chat_service.handle_turn("", "hello")

    def test_build_config_should_raise_invalid_input_for_bad_override(
        self, chat_service: ChatService
    ) -> None:
        """Test an out-of-range override becomes InvalidInput."""
        with pytest.raises(InvalidInputError) as exc_info:
            chat_service.build_config({"similarityThreshold": 2})

        assert exc_info.value.details["field"] == "config"


class TestHandleTurnSuccess:
    """Test suite for a healthy turn."""

    @pytest.mark.asyncio
    async def test_handle_turn_should_return_context_and_session(
        self,
        chat_service: ChatService,
        mock_search_engine: MagicMock,
        sample_session_id: uuid.UUID,
        make_result,
    ) -> None:
        """Test the turn returns assembled context, session id and degraded flag."""
        # Arrange
        mock_search_engine.search.return_value = SearchOutcome(
            results=[make_result("p1", 0.9), make_result("p2", 0.8)],
            strategies=["vector", "lexical"],
        )

        # Act
        result = await chat_service.handle_turn("tab-key", "Tell me about the p1 project")

        # Assert
        assert isinstance(result, TurnResult)
        assert result.session_id == sample_session_id
        assert [c.content_id for c in result.context] == ["p1", "p2"]
        assert result.degraded is False
        assert result.intent.is_project_query is True
        assert result.search_metrics is None

    @pytest.mark.asyncio
    async def test_handle_turn_should_search_with_config_values(
        self,
        chat_service: ChatService,
        mock_search_engine: MagicMock,
    ) -> None:
        """Test threshold, hybrid flag and result cap come from the per-call config."""
        # Arrange
        config = chat_service.build_config({"similarityThreshold": 0.4, "useHybridSearch": False, "maxContextItems": 8})

        # Act
        await chat_service.handle_turn("tab-key", "python", config)

        # Assert
        mock_search_engine.search.assert_awaited_once_with(
            "python",
            threshold=0.4,
            max_results=8,
            use_hybrid=False,
            project_name="python",
        )

    @pytest.mark.asyncio
    async def test_handle_turn_should_pass_degraded_flag_through(
        self,
        chat_service: ChatService,
        mock_search_engine: MagicMock,
        make_result,
    ) -> None:
        """Test a degraded search yields a degraded turn, not an error."""
        # Arrange
        mock_search_engine.search.return_value = SearchOutcome(
            results=[make_result("p1", 0.8, match_type="lexical")],
            degraded=True,
            vector_error="Embedding provider timed out",
            strategies=["lexical"],
        )

        # Act
        result = await chat_service.handle_turn("tab-key", "python")

        # Assert
        assert result.degraded is True
        assert [c.content_id for c in result.context] == ["p1"]

    @pytest.mark.asyncio
    async def test_handle_turn_should_trim_history_to_limit(
        self,
        chat_service: ChatService,
        mock_session_service: MagicMock,
        sample_session_id: uuid.UUID,
    ) -> None:
        """Test history is read with the configured limit and capped."""
        # Arrange
        mock_session_service.history.return_value = [message("user", "m4"), message("assistant", "m5")]
        config = chat_service.build_config({"historyLimit": 2})

        # Act
        result = await chat_service.handle_turn("tab-key", "python", config)

        # Assert
        mock_session_service.history.assert_awaited_once_with(sample_session_id, 2)
        assert [m.content for m in result.history] == ["m4", "m5"]

    @pytest.mark.asyncio
    async def test_handle_turn_should_store_user_message_and_title(
        self,
        chat_service: ChatService,
        mock_session_service: MagicMock,
        sample_session_id: uuid.UUID,
    ) -> None:
        """Test the first prompt of a session is stored and titles it."""
        # Act
        result = await chat_service.handle_turn("tab-key", "What tools did you use?")

        # Assert
        mock_session_service.append_message.assert_awaited_once_with(
            sample_session_id, "user", "What tools did you use?"
        )
        mock_session_service.set_title_from_prompt.assert_awaited_once()
        assert result.message_persisted is True

    @pytest.mark.asyncio
    async def test_handle_turn_should_not_retitle_ongoing_session(
        self,
        chat_service: ChatService,
        mock_session_service: MagicMock,
    ) -> None:
        """Test later prompts do not rewrite the title."""
        # Arrange
        mock_session_service.history.return_value = [message("user", "hi")]

        # Act
        await chat_service.handle_turn("tab-key", "second question")

        # Assert
        mock_session_service.set_title_from_prompt.assert_not_called()

    @pytest.mark.asyncio
    async def test_handle_turn_should_expose_metrics_when_requested(
        self,
        chat_service: ChatService,
    ) -> None:
        """Test showSearchMetrics adds retrieval diagnostics."""
        # Arrange
        config = chat_service.build_config({"showSearchMetrics": True})

        # Act
        result = await chat_service.handle_turn("tab-key", "python", config)

        # Assert
        assert result.search_metrics["strategies"] == ["vector", "lexical"]
        assert result.search_metrics["result_count"] == 0
        assert "elapsed_ms" in result.search_metrics


class TestHandleTurnAnalytics:
    """Test suite for analytics scheduling."""

    @pytest.mark.asyncio
    async def test_handle_turn_should_schedule_analytics(
        self,
        chat_service: ChatService,
        mock_analytics: MagicMock,
        sample_session_id: uuid.UUID,
    ) -> None:
        """Test one retrieval-stage record is scheduled per turn."""
        # Act
        await chat_service.handle_turn("tab-key", "python")

        # Assert
        mock_analytics.record.assert_called_once()
        kwargs = mock_analytics.record.call_args.kwargs
        assert kwargs["query"] == "python"
        assert kwargs["response"] is None
        assert kwargs["session_id"] == sample_session_id
        assert kwargs["enabled"] is True
        assert kwargs["metadata"]["stage"] == "retrieval"
        assert kwargs["metadata"]["degraded"] is False

    @pytest.mark.asyncio
    async def test_store_failure_after_search_should_not_fail_turn(
        self,
        chat_service: ChatService,
        mock_session_service: MagicMock,
    ) -> None:
        """Test a store outage while saving the user message still returns context."""
        # Arrange
        mock_session_service.append_message.side_effect = StoreUnavailableError("down")

        # Act
        result = await chat_service.handle_turn("tab-key", "python")

        # Assert
        assert result.message_persisted is False
        assert result.context == []


class TestHandleTurnPersistenceOff:
    """Test suite for persistConversations=false."""

    @pytest.mark.asyncio
    async def test_should_not_create_session_or_write(
        self,
        chat_service: ChatService,
        mock_session_service: MagicMock,
        mock_analytics: MagicMock,
        sample_session_id: uuid.UUID,
    ) -> None:
        """Test no session is created and nothing is stored."""
        # Arrange
        config = chat_service.build_config({"persistConversations": False})

        # Act
        result = await chat_service.handle_turn("tab-key", "python", config)

        # Assert
        mock_session_service.resolve_session.assert_not_called()
        mock_session_service.lookup_session.assert_awaited_once_with("tab-key")
        mock_session_service.append_message.assert_not_called()
        assert mock_analytics.record.call_args.kwargs["enabled"] is False
        assert result.session_id == sample_session_id

    @pytest.mark.asyncio
    async def test_unknown_key_should_return_context_without_session(
        self,
        chat_service: ChatService,
        mock_session_service: MagicMock,
    ) -> None:
        """Test an unseen key yields a null session and empty history."""
        # Arrange
        mock_session_service.lookup_session.return_value = None
        config = chat_service.build_config({"persistConversations": False})

        # Act
        result = await chat_service.handle_turn("tab-key", "python", config)

        # Assert
        assert result.session_id is None
        assert result.history == []
        mock_session_service.history.assert_not_called()


class TestHandleTurnFailures:
    """Test suite for fatal errors."""

    @pytest.mark.asyncio
    async def test_store_unavailable_should_abort_before_search(
        self,
        chat_service: ChatService,
        mock_session_service: MagicMock,
        mock_search_engine: MagicMock,
    ) -> None:
        """Test session resolution failure propagates and skips search."""
        # Arrange
        mock_session_service.resolve_session.side_effect = StoreUnavailableError("down")

        # Act & Assert
        with pytest.raises(StoreUnavailableError):
            await chat_service.handle_turn("tab-key", "python")

        mock_search_engine.search.assert_not_called()

    @pytest.mark.asyncio
    async def test_critical_failure_should_propagate_without_analytics(
        self,
        chat_service: ChatService,
        mock_search_engine: MagicMock,
        mock_analytics: MagicMock,
        mock_session_service: MagicMock,
    ) -> None:
        """Test lexical failure aborts the turn and stores nothing."""
        # Arrange
        mock_search_engine.search.side_effect = CriticalFailureError("Lexical search failed")

        # Act & Assert
        with pytest.raises(CriticalFailureError):
            await chat_service.handle_turn("tab-key", "python")

        mock_analytics.record.assert_not_called()
        mock_session_service.append_message.assert_not_called()


class TestRelevantProject:
    """Test suite for the named-project lookup and featured project of a turn."""

    @pytest.mark.asyncio
    async def test_named_project_should_be_looked_up_and_featured(
        self,
        chat_service: ChatService,
        mock_search_engine: MagicMock,
        make_result,
    ) -> None:
        """Test an explicitly named project is passed to search and returned."""
        # Arrange
        mock_search_engine.search.return_value = SearchOutcome(
            results=[
                make_result("weather-dashboard", 0.99, match_type="direct_project_match", title="Weather Dashboard"),
            ],
            strategies=["direct_project_match", "vector", "lexical"],
        )

        # Act
        result = await chat_service.handle_turn("tab-key", "Tell me about the weather dashboard project")

        # Assert
        assert mock_search_engine.search.call_args.kwargs["project_name"] == "weather dashboard"
        assert result.relevant_project == {"title": "Weather Dashboard", "name": "Weather Dashboard"}

    @pytest.mark.asyncio
    async def test_general_question_should_not_feature_weak_project(
        self,
        chat_service: ChatService,
        mock_search_engine: MagicMock,
        make_result,
    ) -> None:
        """Test no project is featured for a general question below 0.85."""
        # Arrange
        mock_search_engine.search.return_value = SearchOutcome(
            results=[make_result("about", 0.9, content_type="general_info"), make_result("p1", 0.82)],
            strategies=["vector", "lexical"],
        )

        # Act
        result = await chat_service.handle_turn("tab-key", "What are your technical skills?")

        # Assert
        assert mock_search_engine.search.call_args.kwargs["project_name"] is None
        assert result.relevant_project is None

    @pytest.mark.asyncio
    async def test_general_question_should_feature_strong_project(
        self,
        chat_service: ChatService,
        mock_search_engine: MagicMock,
        make_result,
    ) -> None:
        """Test a project above 0.85 is featured even for a general question."""
        # Arrange
        mock_search_engine.search.return_value = SearchOutcome(
            results=[make_result("about", 0.95, content_type="general_info"), make_result("chatbot", 0.9)],
            strategies=["vector", "lexical"],
        )

        # Act
        result = await chat_service.handle_turn("tab-key", "What are your technical skills?")

        # Assert
        assert result.relevant_project["name"] == "chatbot"


class TestRecordReply:
    """Test suite for ChatService.record_reply()."""

    @pytest.mark.asyncio
    async def test_record_reply_should_store_assistant_message(
        self,
        chat_service: ChatService,
        mock_session_service: MagicMock,
        mock_analytics: MagicMock,
        sample_session_id: uuid.UUID,
    ) -> None:
        """Test the reply is appended and a reply-stage record scheduled."""
        # Act
        recorded = await chat_service.record_reply(sample_session_id, "python?", "Yes, mostly Python.")

        # Assert
        assert recorded is True
        mock_session_service.append_message.assert_awaited_once_with(
            sample_session_id, "assistant", "Yes, mostly Python."
        )
        kwargs = mock_analytics.record.call_args.kwargs
        assert kwargs["response"] == "Yes, mostly Python."
        assert kwargs["metadata"]["stage"] == "reply"

    @pytest.mark.asyncio
    async def test_record_reply_should_skip_when_persistence_off(
        self,
        chat_service: ChatService,
        mock_session_service: MagicMock,
        sample_session_id: uuid.UUID,
    ) -> None:
        """Test nothing is stored with persistConversations=false."""
        # Arrange
        config = chat_service.build_config({"persistConversations": False})

        # Act
        recorded = await chat_service.record_reply(sample_session_id, "q", "a", config)

        # Assert
        assert recorded is False
        mock_session_service.append_message.assert_not_called()

    @pytest.mark.asyncio
    async def test_record_reply_should_reject_empty_response(
        self, chat_service: ChatService, sample_session_id: uuid.UUID
    ) -> None:
        """Test an empty reply is invalid."""
        with pytest.raises(InvalidInputError):
            await chat_service.record_reply(sample_session_id, "q", "  ")

    @pytest.mark.asyncio
    async def test_record_reply_should_raise_for_unknown_session(
        self,
        chat_service: ChatService,
        mock_session_service: MagicMock,
    ) -> None:
        """Test replies to a missing session raise SessionNotFound."""
        # Arrange
        missing = uuid.uuid4()
        mock_session_service.ensure_exists.side_effect = SessionNotFoundError(str(missing))

        # Act & Assert
        with pytest.raises(SessionNotFoundError):
            await chat_service.record_reply(missing, "q", "a")

    @pytest.mark.asyncio
    async def test_record_reply_should_validate_query(
        self,
        chat_service: ChatService,
        mock_session_service: MagicMock,
        sample_session_id: uuid.UUID,
    ) -> None:
        """Test a blank or oversized query is rejected before anything is stored."""
        with pytest.raises(InvalidInputError) as exc_info:
            await chat_service.record_reply(sample_session_id, "   ", "Airflow and dbt.")

        assert exc_info.value.details["field"] == "query"
        with pytest.raises(InvalidInputError):
            await chat_service.record_reply(sample_session_id, "x" * 5000, "Airflow and dbt.")
        mock_session_service.append_message.assert_not_called()
