"""Fans one search request out to per-category sub-queries."""

import asyncio
import time
from typing import Any

import structlog

from chatsearch.reporting import Client, QueryLog, QueryStats, ReportingLogger
from chatsearch.search.categories import DocumentCategory
from chatsearch.search.composer import PARAM_TEXT, compose, type_filter_accepts
from chatsearch.search.defaults import QueryDefaults
from chatsearch.search.engine import EngineResult, SearchEngine
from chatsearch.search.materializer import materialize_result
from chatsearch.search.params import Params

logger = structlog.get_logger()


class SearchOrchestrator:
    """Runs the category sub-queries of a request and merges their results.

    Sub-queries run concurrently, at most ``max_workers`` at a time. The
    first failing sub-query cancels the others and fails the request.

    Attributes:
        engine: Search engine executing the sub-queries.
        defaults: Immutable default parameter layers.
        file_search_enabled: Whether file documents are queried.
        client_name: Collection name put into report records.
    """

    def __init__(
        self,
        engine: SearchEngine,
        defaults: QueryDefaults,
        file_search_enabled: bool = False,
        max_workers: int = 4,
        client_name: str | None = None,
        reporting: ReportingLogger | None = None,
    ) -> None:
        """Initialize orchestrator.

        Args:
            engine: Search engine executing the sub-queries.
            defaults: Default parameter layers loaded at startup.
            file_search_enabled: Query file documents.
            max_workers: Maximum concurrent sub-queries per request.
            client_name: Collection name put into report records.
            reporting: Report logger; a new one is created if None.
        """
        self.engine = engine
        self.defaults = defaults
        self.file_search_enabled = file_search_enabled
        self.client_name = client_name
        self._semaphore = asyncio.Semaphore(max(1, max_workers))
        self._reporting = reporting or ReportingLogger()

    def enabled_categories(self) -> list[DocumentCategory]:
        """Categories the configuration allows to query, in response order.

        Message, room and user are always searched; files only when enabled.
        """
        return [
            category
            for category in DocumentCategory
            if category is not DocumentCategory.FILE or self.file_search_enabled
        ]

    def active_categories(self, request: Params) -> list[DocumentCategory]:
        """Enabled categories selected by the caller's ``type`` parameter."""
        return [
            category
            for category in self.enabled_categories()
            if type_filter_accepts(request, category)
        ]

    async def _query_category(
        self, category: DocumentCategory, request: Params
    ) -> tuple[dict[str, Any], EngineResult]:
        query = compose(category, request, self.defaults)
        async with self._semaphore:
            result = await self.engine.execute(query.params)
        return materialize_result(result, query, self.defaults), result

    async def search(self, request: Params) -> dict[str, Any]:
        """Answer a search request.

        Args:
            request: Caller parameters.

        Returns:
            One envelope per queried category, keyed by category key.

        Raises:
            SearchError: If composing or executing any sub-query fails.
        """
        start = time.perf_counter()
        categories = self.active_categories(request)

        tasks = [
            asyncio.create_task(self._query_category(category, request))
            for category in categories
        ]
        try:
            outcomes = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        response: dict[str, Any] = {}
        stats = QueryStats(searchterm=request.get(PARAM_TEXT))
        for category, (envelope, result) in zip(categories, outcomes):
            response[category.key] = envelope
            stats.resultsize[category.key] = result.num_found

        stats.querytime = round((time.perf_counter() - start) * 1000)
        self._reporting.log_query(
            QueryLog(client=Client(collection=self.client_name), query=stats)
        )
        logger.debug(
            "search_completed",
            categories=[c.key for c in categories],
            duration_ms=stats.querytime,
        )
        return response
