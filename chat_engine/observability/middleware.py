"""
Request middleware: correlation ID binding and access logging.

CorrelationMiddleware must wrap RequestLoggingMiddleware so the access
log lines and every log line of the turn share one ID.

Dependencies: fastapi, starlette, chat_engine.observability
System role: Request/response observability injection
"""

import logging
import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from chat_engine.observability.correlation import (
    clear_correlation_id,
    set_correlation_id,
)
from chat_engine.observability.log_utils import log_exception_with_context, log_with_context

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One log line when a request arrives and one when it completes."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = time.perf_counter()
        route = f"{request.method} {request.url.path}"
        log_with_context(
            logger,
            logging.INFO,
            route,
            query_string=request.url.query or None,
            client_host=request.client.host if request.client else None,
        )

        try:
            response = await call_next(request)
        except Exception as e:
            log_exception_with_context(logger, f"{route} - unhandled", e, process_time_ms=_elapsed_ms(started))
            raise

        log_with_context(
            logger,
            logging.INFO,
            f"{route} - {response.status_code}",
            status_code=response.status_code,
            process_time_ms=_elapsed_ms(started),
        )
        return response


class CorrelationMiddleware(BaseHTTPMiddleware):
    """
    Bind the caller's ``X-Correlation-ID`` (or a fresh one) for the request.

    The ID is echoed on the response and cleared afterwards. Analytics tasks
    scheduled during the request keep it, since tasks copy the context.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        correlation_id = set_correlation_id(request.headers.get(CORRELATION_HEADER))
        try:
            response = await call_next(request)
        finally:
            clear_correlation_id()
        response.headers[CORRELATION_HEADER] = correlation_id
        return response
