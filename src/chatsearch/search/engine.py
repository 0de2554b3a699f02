"""Client for the external document-search engine."""

from dataclasses import dataclass, field
from typing import Any, Protocol

import httpx
import structlog

from chatsearch.search.errors import EngineError
from chatsearch.search.params import Params

logger = structlog.get_logger()


@dataclass
class EngineResult:
    """Ranked documents and side data returned for one query.

    Attributes:
        docs: Returned documents in rank order.
        num_found: Total number of matching documents.
        start: Offset of the first returned document.
        max_score: Highest score, or None when scoring was disabled.
        facet_counts: Field/query facet block, if faceting was requested.
        facets: JSON facet block, if JSON facets were requested.
        highlighting: Snippets keyed by unique id, then by field name.
    """

    docs: list[dict[str, Any]] = field(default_factory=list)
    num_found: int = 0
    start: int = 0
    max_score: float | None = None
    facet_counts: dict[str, Any] | None = None
    facets: dict[str, Any] | None = None
    highlighting: dict[str, dict[str, Any]] | None = None

    @classmethod
    def from_json(cls, payload: dict[str, Any]) -> "EngineResult":
        """Parse a ``wt=json`` select response."""
        response = payload.get("response") or {}
        return cls(
            docs=list(response.get("docs") or []),
            num_found=int(response.get("numFound") or 0),
            start=int(response.get("start") or 0),
            max_score=response.get("maxScore"),
            facet_counts=payload.get("facet_counts"),
            facets=payload.get("facets"),
            highlighting=payload.get("highlighting"),
        )

    def facet_field(self, name: str) -> list[tuple[str, int]]:
        """Term counts of a facet field in engine order.

        Accepts the flat (``[t1, c1, t2, c2]``), pair (``[[t1, c1]]``)
        and map (``{t1: c1}``) encodings.
        """
        fields = (self.facet_counts or {}).get("facet_fields") or {}
        raw = fields.get(name)
        if not raw:
            return []
        if isinstance(raw, dict):
            return [(str(term), int(count)) for term, count in raw.items()]
        if isinstance(raw[0], (list, tuple)):
            return [(str(term), int(count)) for term, count in raw]
        return [(str(raw[i]), int(raw[i + 1])) for i in range(0, len(raw) - 1, 2)]


class SearchEngine(Protocol):
    """Executes structured queries against the document index."""

    async def execute(self, params: Params) -> EngineResult: ...


class SolrEngine:
    """Solr-compatible engine reached over HTTP.

    Attributes:
        base_url: Core URL; queries go to ``<base_url>/select``.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize engine client.

        Args:
            base_url: Core URL of the engine.
            timeout: Seconds before a request is abandoned.
            transport: Optional transport, used to stub the engine in tests.
        """
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    async def execute(self, params: Params) -> EngineResult:
        """Run a select query.

        Args:
            params: Fully composed query parameters.

        Returns:
            Parsed engine result.

        Raises:
            EngineError: If the engine is unreachable, times out, answers
                with an error status or returns invalid JSON.
        """
        form = params.to_dict()
        form["wt"] = ["json"]

        try:
            response = await self._client.post("/select", data=form)
        except httpx.TimeoutException as e:
            raise EngineError(f"Search engine timed out: {e}") from e
        except httpx.HTTPError as e:
            raise EngineError(f"Search engine unreachable: {e}") from e

        if response.status_code >= 400:
            logger.warning(
                "engine_error_status",
                status=response.status_code,
                body=response.text[:200],
            )
            raise EngineError(
                f"Search engine answered {response.status_code}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise EngineError("Search engine returned invalid JSON") from e

        return EngineResult.from_json(payload)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
        logger.info("engine_client_closed", base_url=self.base_url)
