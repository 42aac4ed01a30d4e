"""
Test suite for the engine exception hierarchy.

System role: Verification of error kinds and context details
"""

from chat_engine.core.exceptions import (
    AnalyticsWriteFailedError,
    ChatEngineException,
    CriticalFailureError,
    EmbeddingError,
    InvalidInputError,
    SessionNotFoundError,
    StoreUnavailableError,
)


class TestExceptionKinds:
    """Test suite for the kind reported to API callers."""

    def test_every_error_should_be_an_engine_exception(self) -> None:
        """Test all engine errors share the base class."""
        for exc_type in (
            InvalidInputError,
            StoreUnavailableError,
            CriticalFailureError,
            EmbeddingError,
            AnalyticsWriteFailedError,
        ):
            assert issubclass(exc_type, ChatEngineException)

    def test_kinds_should_match_error_contract(self) -> None:
        """Test the four caller-visible kinds."""
        assert InvalidInputError("bad").kind == "InvalidInput"
        assert SessionNotFoundError("abc").kind == "SessionNotFound"
        assert StoreUnavailableError("down").kind == "StoreUnavailable"
        assert CriticalFailureError("lexical").kind == "CriticalFailure"


class TestExceptionDetails:
    """Test suite for structured context on errors."""

    def test_invalid_input_should_record_field(self) -> None:
        """Test the failing field lands in details."""
        # Act
        exc = InvalidInputError("Query must not be empty", field="query")

        # Assert
        assert exc.details == {"field": "query"}
        assert exc.message == "Query must not be empty"

    def test_store_unavailable_should_record_operation(self) -> None:
        """Test the failing operation lands in details."""
        # Act
        exc = StoreUnavailableError("down", operation="history", details={"error_type": "OSError"})

        # Assert
        assert exc.details == {"error_type": "OSError", "operation": "history"}

    def test_str_should_include_details(self) -> None:
        """Test string form carries details for logs."""
        # Act
        text = str(SessionNotFoundError("abc"))

        # Assert
        assert text.startswith("Session not found: abc")
        assert "session_id" in text

    def test_str_should_be_message_without_details(self) -> None:
        """Test string form is the bare message when there is no context."""
        assert str(CriticalFailureError("Lexical search failed")) == "Lexical search failed"
