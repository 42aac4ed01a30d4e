"""
FastAPI application entry point.

Initializes FastAPI app, registers routers, error handlers and
middleware, and configures lifespan.

Dependencies: fastapi, chat_engine.api, chat_engine.observability, chat_engine.configs
System role: Application initialization and configuration
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chat_engine import __version__
from chat_engine.api import api_router
from chat_engine.api.deps import get_service_cache
from chat_engine.api.errors import register_exception_handlers
from chat_engine.boundary.db import dispose_engine, init_db
from chat_engine.configs import get_settings
from chat_engine.observability.logger import configure_logging
from chat_engine.observability.middleware import (
    CorrelationMiddleware,
    RequestLoggingMiddleware,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Startup builds the shared search engine and analytics recorder.
    Shutdown drains pending analytics writes (bounded by
    CHAT_ANALYTICS_DRAIN_TIMEOUT) and closes pooled connections.
    """
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("Application startup: logging configured")

    if settings.database.create_tables:
        await init_db()
        logger.info("Application startup: database tables ensured")

    cache = get_service_cache()
    app.state.search_engine = cache.search_engine
    app.state.analytics = cache.analytics
    vector_state = "enabled" if cache.search_engine.embedder is not None else "disabled"
    logger.info(f"Application startup complete: vector search {vector_state}")

    yield

    abandoned = await cache.analytics.drain(settings.chat.analytics_drain_timeout)
    if abandoned:
        logger.warning(f"Application shutdown: {abandoned} analytics writes abandoned")
    await dispose_engine()
    logger.info("Application shutdown")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        FastAPI: Configured application instance
    """
    app = FastAPI(
        title="Portfolio Chat Engine API",
        description="Retrieval-augmented conversation engine for the portfolio chat",
        version=__version__,
        lifespan=lifespan,
    )

    register_exception_handlers(app)

    # CorrelationMiddleware wraps request logging so log lines carry the ID
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "chat_engine.main:app",
        host="localhost",
        port=8082,
        reload=True,
    )
