"""
API error mapping.

Every engine exception becomes an ErrorResponse body ``{kind, message}``
with a status chosen by its kind. Request validation failures are
reported as InvalidInput.

Dependencies: fastapi, chat_engine.core.exceptions
System role: HTTP error translation
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from chat_engine.core.exceptions import ChatEngineException
from chat_engine.models.common import ErrorResponse

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    "InvalidInput": status.HTTP_400_BAD_REQUEST,
    "SessionNotFound": status.HTTP_404_NOT_FOUND,
    "StoreUnavailable": status.HTTP_503_SERVICE_UNAVAILABLE,
    "CriticalFailure": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def error_response(status_code: int, kind: str, message: str, details: dict | None = None) -> JSONResponse:
    body = ErrorResponse(kind=kind, message=message, details=details or None)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


async def engine_exception_handler(request: Request, exc: ChatEngineException) -> JSONResponse:
    """Map a ChatEngineException to its status and error body."""
    status_code = STATUS_BY_KIND.get(exc.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)
    if status_code >= 500:
        logger.error(f"{__name__}:engine_exception_handler - {request.url.path} {exc.kind}: {exc}")
    else:
        logger.info(f"{__name__}:engine_exception_handler - {request.url.path} {exc.kind}: {exc.message}")
    details = exc.details if exc.kind == "InvalidInput" else None
    return error_response(status_code, exc.kind, exc.message, details)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies and parameters as InvalidInput."""
    fields = [".".join(str(part) for part in err.get("loc", ())) for err in exc.errors()]
    return error_response(
        status.HTTP_400_BAD_REQUEST,
        "InvalidInput",
        "Request validation failed",
        {"fields": fields},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install engine and validation error handlers on an app."""
    app.add_exception_handler(ChatEngineException, engine_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
