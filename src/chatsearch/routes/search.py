"""Multi-category search and suggestion endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, Body, Request

from chatsearch.search.params import Params
from chatsearch.search.schemas import CategoryResult, SuggestionResponse

if TYPE_CHECKING:
    from chatsearch.search.orchestrator import SearchOrchestrator
    from chatsearch.search.suggestions import SuggestionEngine

router = APIRouter(tags=["search"])

SEARCH_DESCRIPTION = (
    "Runs one sub-query per document category (message, room, user, file) "
    "and returns the results keyed by category. Parameters: text or query, "
    "language, type, acl, excl.msg, excl.room, start/rows (also "
    "<type>.start/<type>.rows) and sort."
)


def _query_params(request: Request) -> Params:
    return Params.from_items(request.query_params.multi_items())


@router.get(
    "/search",
    response_model=dict[str, CategoryResult],
    response_model_exclude_none=True,
    summary="Search messages, rooms, users and files",
    description=SEARCH_DESCRIPTION,
)
async def search(request: Request) -> dict[str, Any]:
    """Search all selected categories with query-string parameters.

    Args:
        request: FastAPI request (provides query parameters and app state).

    Returns:
        One result envelope per queried category.
    """
    orchestrator: SearchOrchestrator = request.app.state.orchestrator
    return await orchestrator.search(_query_params(request))


@router.post(
    "/search",
    response_model=dict[str, CategoryResult],
    response_model_exclude_none=True,
    summary="Search messages, rooms, users and files",
    description=SEARCH_DESCRIPTION,
)
async def search_body(
    request: Request,
    body: dict[str, Any] | None = Body(default=None),
) -> dict[str, Any]:
    """Search with parameters sent as a JSON object.

    List values are treated as repeated parameters.

    Args:
        request: FastAPI request (provides app state).
        body: Search parameters.

    Returns:
        One result envelope per queried category.
    """
    orchestrator: SearchOrchestrator = request.app.state.orchestrator
    return await orchestrator.search(Params.from_mapping(body or {}))


@router.get(
    "/suggest",
    response_model=SuggestionResponse,
    summary="Complete a partially typed search phrase",
)
async def suggest(request: Request) -> SuggestionResponse:
    """Suggest completions for the ``text`` parameter.

    Args:
        request: FastAPI request (provides query parameters and app state).

    Returns:
        Up to the configured number of completions with counts.
    """
    engine: SuggestionEngine = request.app.state.suggestion_engine
    suggestions = await engine.suggest(_query_params(request))
    return SuggestionResponse.model_validate({"suggestion": suggestions})


@router.post(
    "/suggest",
    response_model=SuggestionResponse,
    summary="Complete a partially typed search phrase",
)
async def suggest_body(
    request: Request,
    body: dict[str, Any] | None = Body(default=None),
) -> SuggestionResponse:
    """Suggest completions with parameters sent as a JSON object."""
    engine: SuggestionEngine = request.app.state.suggestion_engine
    suggestions = await engine.suggest(Params.from_mapping(body or {}))
    return SuggestionResponse.model_validate({"suggestion": suggestions})
