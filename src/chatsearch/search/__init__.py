"""Multi-category search over a Solr-compatible engine."""

from chatsearch.search.categories import DocumentCategory
from chatsearch.search.defaults import QueryDefaults, load_query_defaults
from chatsearch.search.engine import EngineResult, SearchEngine, SolrEngine
from chatsearch.search.errors import (
    ConfigurationError,
    EngineError,
    InvalidArgumentError,
    SearchError,
)
from chatsearch.search.orchestrator import SearchOrchestrator
from chatsearch.search.params import LayeredParams, Params
from chatsearch.search.suggestions import SuggestionEngine

__all__ = [
    "ConfigurationError",
    "DocumentCategory",
    "EngineError",
    "EngineResult",
    "InvalidArgumentError",
    "LayeredParams",
    "Params",
    "QueryDefaults",
    "SearchEngine",
    "SearchError",
    "SearchOrchestrator",
    "SolrEngine",
    "SuggestionEngine",
    "load_query_defaults",
]
