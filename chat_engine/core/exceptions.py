"""
Exception hierarchy for the conversation engine.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging, and
carry the ``kind`` reported to API callers.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class ChatEngineException(Exception):
    """Base exception for all conversation engine errors."""

    kind = "InternalError"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class InvalidInputError(ChatEngineException):
    """Raised when a request is rejected before any I/O (empty query, bad key)."""

    kind = "InvalidInput"

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class SessionNotFoundError(ChatEngineException):
    """Raised when a session id does not resolve to a stored session."""

    kind = "SessionNotFound"

    def __init__(self, session_id: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize session not found error.

        Args:
            session_id: ID of the missing session
            details: Additional context
        """
        details = details or {}
        details["session_id"] = session_id
        super().__init__(f"Session not found: {session_id}", details)


class StoreUnavailableError(ChatEngineException):
    """Raised when the session/history datastore cannot be reached."""

    kind = "StoreUnavailable"

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize store unavailable error.

        Args:
            message: Error message
            operation: Store operation that failed (lookup, create, append, history)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)


class CriticalFailureError(ChatEngineException):
    """Raised when lexical search fails and no usable results can be produced."""

    kind = "CriticalFailure"


class EmbeddingError(ChatEngineException):
    """Raised when the embedding provider cannot embed a query."""

    kind = "EmbeddingUnavailable"


class VectorStoreError(ChatEngineException):
    """Raised when a corpus query fails."""

    kind = "VectorStoreError"

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize vector store error.

        Args:
            message: Error message
            operation: Operation that failed (vector_search, lexical_search)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)


class AnalyticsWriteFailedError(ChatEngineException):
    """Analytics insert failed. Logged by the recorder, never surfaced."""

    kind = "AnalyticsWriteFailed"
