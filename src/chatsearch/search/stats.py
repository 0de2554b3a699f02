"""Per-category index statistics for the ping endpoint."""

import asyncio
from typing import Any

from chatsearch.search.categories import DocumentCategory
from chatsearch.search.engine import SearchEngine
from chatsearch.search.filters import build_type_filter
from chatsearch.search.params import Params

FIELD_AGE = "created"


def stats_categories(
    general_search_enabled: bool, file_search_enabled: bool
) -> list[DocumentCategory]:
    """Categories reported on by the ping endpoint, in enum order."""
    return [
        category
        for category in DocumentCategory
        if (file_search_enabled if category is DocumentCategory.FILE else general_search_enabled)
    ]


def build_stats_query(category: DocumentCategory) -> Params:
    """Count query reporting the oldest and newest document of a category."""
    params = Params()
    params.set("q", "*:*")
    params.set("rows", "0")
    params.set("fq", build_type_filter(category))
    params.set(
        "json.facet",
        f"{{oldest:'min({FIELD_AGE})', newest:'max({FIELD_AGE})'}}",
    )
    return params


async def collect_stats(
    engine: SearchEngine, categories: list[DocumentCategory]
) -> dict[str, Any]:
    """Collect the JSON facet block of every category.

    Args:
        engine: Search engine to query.
        categories: Categories to report on.

    Returns:
        Facet block (``count``, ``oldest``, ``newest``) keyed by category key.
    """
    results = await asyncio.gather(
        *(engine.execute(build_stats_query(c)) for c in categories)
    )
    return {
        category.key: result.facets or {"count": result.num_found}
        for category, result in zip(categories, results)
    }
