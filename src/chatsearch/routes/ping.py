"""Ping endpoint reporting schema version, index stats and api config."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from fastapi import APIRouter, Query, Request

from chatsearch.reporting import Client, IndexLog
from chatsearch.search.schemas import PingResponse
from chatsearch.search.stats import collect_stats, stats_categories

if TYPE_CHECKING:
    from chatsearch.config import Settings
    from chatsearch.search.orchestrator import SearchOrchestrator

logger = structlog.get_logger()

router = APIRouter(tags=["ping"])


@router.get(
    "/ping",
    response_model=PingResponse,
    response_model_exclude_none=True,
    summary="Service status with optional index statistics",
)
async def ping(
    request: Request,
    schema_version: bool = Query(default=True, alias="schemaVersion"),
    stats: bool = Query(default=False),
    config: bool = Query(default=True),
) -> PingResponse:
    """Report service status.

    Args:
        request: FastAPI request (provides app state).
        schema_version: Include the index schema version.
        stats: Include per-category document counts and age range.
        config: Include which search features are enabled.

    Returns:
        Ping response with the requested sections.
    """
    settings: Settings = request.app.state.settings
    orchestrator: SearchOrchestrator = request.app.state.orchestrator

    response = PingResponse()
    if schema_version:
        response.schemaVersion = settings.schema_version

    if stats:
        response.stats = await collect_stats(
            orchestrator.engine,
            stats_categories(
                settings.general_search_enabled, settings.file_search_enabled
            ),
        )
        request.app.state.reporting.log_index(
            IndexLog(
                client=Client(collection=settings.client_name),
                stats={
                    key: {"count": block.get("count")}
                    for key, block in response.stats.items()
                },
            )
        )
        logger.info("index_stats_collected", categories=list(response.stats))

    if config:
        response.config = settings.api_config()

    return response
