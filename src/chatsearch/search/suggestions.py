"""Typeahead completions from facet counts of the suggestion field."""

import re
import time
from typing import Any

import structlog

from chatsearch.config import DEFAULT_SUGGESTION_SIZE
from chatsearch.reporting import Client, QueryStats, ReportingLogger, SuggestionLog
from chatsearch.search.categories import DocumentCategory
from chatsearch.search.composer import PARAM_TEXT
from chatsearch.search.engine import SearchEngine
from chatsearch.search.filters import (
    FIELD_TYPE,
    PARAM_TYPE,
    build_acl_filter,
    build_terms_filter,
    get_multi_value_param,
)
from chatsearch.search.params import Params
from chatsearch.search.querytext import escape_query_chars

logger = structlog.get_logger()

FIELD_SUGGESTION = "suggestion"
FACET_LIMIT = 15

_WHITESPACE = re.compile(r"\s+")


def tokenize(text: str) -> tuple[list[str], str | None]:
    """Split partial input into committed tokens and the facet prefix.

    Args:
        text: Partial phrase typed by the caller.

    Returns:
        Tuple of (committed lowercase tokens, prefix). The prefix is None
        when the input ends in whitespace.
    """
    tokens = [t.lower() for t in _WHITESPACE.split(text) if t]
    if not tokens or text[-1].isspace():
        return tokens, None
    return tokens[:-1], tokens[-1]


def _index_values(keys: list[str]) -> list[str]:
    """Map category keys to their ``type`` field values, skipping unknown keys."""
    values = []
    for key in keys:
        try:
            values.append(DocumentCategory.from_key(key.strip()).index_value)
        except ValueError:
            logger.debug("suggestion_type_ignored", type=key)
    return values


class SuggestionEngine:
    """Suggests completions that co-occur with every committed token.

    Attributes:
        engine: Search engine answering the facet query.
        size: Maximum number of suggestions returned.
        client_name: Collection name put into report records.
    """

    def __init__(
        self,
        engine: SearchEngine,
        size: int = DEFAULT_SUGGESTION_SIZE,
        client_name: str | None = None,
        reporting: ReportingLogger | None = None,
    ) -> None:
        self.engine = engine
        self.size = size
        self.client_name = client_name
        self._reporting = reporting or ReportingLogger()

    def build_query(self, tokens: list[str], prefix: str | None, request: Params) -> Params:
        """Facet query for completions of ``prefix``.

        Args:
            tokens: Committed tokens, each required as an exact match.
            prefix: Facet prefix, or None for any term.
            request: Caller parameters holding ``type`` and ``acl``. Types
                are category keys; if none of them is known the query
                matches nothing.

        Returns:
            Parameters of the facet query.
        """
        params = Params()
        params.set("q", "*:*")
        params.set("rows", "0")
        params.set("facet", "true")
        params.set("facet.field", FIELD_SUGGESTION)
        params.set("facet.mincount", "1")
        params.set("facet.limit", str(FACET_LIMIT))
        params.set("facet.prefix", prefix)

        keys = [k for k in get_multi_value_param(PARAM_TYPE, request) or [] if k.strip()]
        if keys:
            params.add("fq", build_terms_filter(FIELD_TYPE, _index_values(keys)))

        for token in tokens:
            params.add("fq", f"{FIELD_SUGGESTION}:{escape_query_chars(token)}")

        params.add("fq", build_acl_filter(request))
        return params

    async def suggest(self, request: Params) -> list[dict[str, Any]]:
        """Suggest completions for the ``text`` parameter.

        Args:
            request: Caller parameters.

        Returns:
            Up to ``size`` ``{"text", "count"}`` entries in engine order.

        Raises:
            SearchError: If the facet query fails.
        """
        start = time.perf_counter()
        text = request.get(PARAM_TEXT)
        if not text or not text.strip():
            return []

        tokens, prefix = tokenize(text)
        logger.debug("suggestion_query", tokens=tokens, prefix=prefix)
        result = await self.engine.execute(self.build_query(tokens, prefix, request))

        head = " ".join(tokens)
        if head:
            head += " "

        suggestions: list[dict[str, Any]] = []
        for term, count in result.facet_field(FIELD_SUGGESTION):
            if term not in tokens:
                suggestions.append({"text": head + term, "count": count})
            if len(suggestions) >= self.size:
                break

        self._reporting.log_suggestion(
            SuggestionLog(
                client=Client(collection=self.client_name),
                query=QueryStats(
                    searchterm=text,
                    querytime=round((time.perf_counter() - start) * 1000),
                    resultsize={FIELD_SUGGESTION: len(suggestions)},
                ),
            )
        )
        return suggestions
