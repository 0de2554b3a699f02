"""FastAPI application factory and lifespan management."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from chatsearch.config import Settings
from chatsearch.middleware.auth import APIKeyMiddleware
from chatsearch.middleware.cors import configure_cors
from chatsearch.middleware.logging import RequestLoggingMiddleware
from chatsearch.reporting import ReportingLogger
from chatsearch.routes import health, ping, search
from chatsearch.search import (
    EngineError,
    InvalidArgumentError,
    SearchEngine,
    SearchOrchestrator,
    SolrEngine,
    SuggestionEngine,
    load_query_defaults,
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifecycle events.

    Loads the default parameter layers, connects the engine client and
    builds the orchestrator and suggestion engine on startup. Closes the
    engine client on shutdown unless it was supplied by the caller.

    Args:
        app: FastAPI application instance.

    Yields:
        None during application runtime.
    """
    settings: Settings = app.state.settings
    logger.info("api_startup", host=settings.host, port=settings.port)

    defaults = load_query_defaults(settings.defaults_file)

    engine: SearchEngine | None = app.state.engine
    owns_engine = engine is None
    if engine is None:
        engine = SolrEngine(settings.engine_url, timeout=settings.engine_timeout)
        app.state.engine = engine

    reporting = ReportingLogger()
    app.state.reporting = reporting
    app.state.orchestrator = SearchOrchestrator(
        engine,
        defaults,
        file_search_enabled=settings.file_search_enabled,
        max_workers=settings.search_workers,
        client_name=settings.client_name,
        reporting=reporting,
    )
    app.state.suggestion_engine = SuggestionEngine(
        engine,
        size=settings.effective_suggestion_size(),
        client_name=settings.client_name,
        reporting=reporting,
    )
    logger.info("api_config_loaded", **settings.api_config())

    try:
        yield
    finally:
        if owns_engine and isinstance(engine, SolrEngine):
            await engine.close()
            app.state.engine = None
        logger.info("api_shutdown")


async def _invalid_argument_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.warning("invalid_argument", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": str(exc)},
    )


async def _engine_error_handler(request: Request, exc: Exception) -> JSONResponse:
    status_code = getattr(exc, "status_code", None)
    if status_code is not None and 400 <= status_code < 500:
        # the engine rejected caller-supplied parameters
        logger.warning(
            "engine_rejected_query",
            path=request.url.path,
            engine_status=status_code,
            error=str(exc),
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": str(exc)},
        )

    logger.error("engine_failed", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"error": "Search engine request failed"},
    )


def create_app(
    settings: Settings | None = None,
    engine: SearchEngine | None = None,
) -> FastAPI:
    """Factory function to create configured FastAPI application.

    Args:
        settings: Configuration instance. Creates default if None.
        engine: Search engine to use instead of the HTTP client.

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        settings = Settings()

    app = FastAPI(
        title="Chat Search API",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/api/v1/docs" if settings.debug else None,
        redoc_url=None,
        openapi_url="/api/v1/openapi.json" if settings.debug else None,
    )
    app.state.settings = settings
    app.state.engine = engine

    configure_cors(app, settings.cors_origins)
    app.add_middleware(RequestLoggingMiddleware)
    if settings.key:
        app.add_middleware(APIKeyMiddleware, api_key=settings.key)

    app.add_exception_handler(InvalidArgumentError, _invalid_argument_handler)
    app.add_exception_handler(EngineError, _engine_error_handler)

    app.include_router(health.router, prefix="/api/v1")
    app.include_router(ping.router, prefix="/api/v1")
    app.include_router(search.router, prefix="/api/v1")

    return app
