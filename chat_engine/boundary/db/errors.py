"""
Datastore error translation.

Maps driver and connection failures onto StoreUnavailableError so callers
see one transient-failure type. Integrity violations pass through untouched
because session creation treats a unique-key conflict as a lost race.

Dependencies: sqlalchemy, chat_engine.core.exceptions
System role: Persistence failure boundary
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import DBAPIError, IntegrityError, InterfaceError, OperationalError

from chat_engine.core.exceptions import StoreUnavailableError


@asynccontextmanager
async def translate_store_errors(operation: str) -> AsyncIterator[None]:
    """
    Re-raise datastore outages as StoreUnavailableError.

    Args:
        operation: Name of the store operation, recorded in error details

    Raises:
        StoreUnavailableError: Connection, driver or OS-level failure
        IntegrityError: Constraint violation (left to the caller)
    """
    try:
        yield
    except IntegrityError:
        raise
    except (OperationalError, InterfaceError, DBAPIError) as e:
        raise StoreUnavailableError(
            f"Datastore unavailable during {operation}",
            operation=operation,
            details={"error_type": type(e).__name__},
        ) from e
    except OSError as e:
        raise StoreUnavailableError(
            f"Datastore connection failed during {operation}",
            operation=operation,
            details={"error_type": type(e).__name__},
        ) from e
