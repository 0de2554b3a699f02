"""Usage report records written to the dedicated report logger."""

import contextlib
from typing import Any, Literal

import structlog
from pydantic import BaseModel, Field
from pydantic_core import PydanticSerializationError

REPORT_LOGGER = "chatsearch.report"


class Client(BaseModel):
    """Index collection that served the request."""

    collection: str | None = None


class QueryStats(BaseModel):
    """Search term, timing and per-category result sizes.

    Attributes:
        searchterm: Text the caller searched for.
        querytime: Elapsed milliseconds for the whole request.
        resultsize: Match count keyed by category.
    """

    searchterm: str | None = None
    querytime: int | None = None
    resultsize: dict[str, int] = Field(default_factory=dict)


class ReportLog(BaseModel):
    """Common shape of all report records."""

    type: str
    client: Client = Field(default_factory=Client)

    def to_record(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict without empty values."""
        return _prune(self.model_dump(mode="json"))


class QueryLog(ReportLog):
    type: Literal["query"] = "query"
    query: QueryStats = Field(default_factory=QueryStats)


class SuggestionLog(ReportLog):
    type: Literal["suggestion"] = "suggestion"
    query: QueryStats = Field(default_factory=QueryStats)


class IndexLog(ReportLog):
    """Per-category document counts reported by the ping endpoint."""

    type: Literal["index"] = "index"
    stats: dict[str, dict[str, Any]] = Field(default_factory=dict)


def _prune(value: Any) -> Any:
    if isinstance(value, dict):
        pruned = {k: _prune(v) for k, v in value.items()}
        return {k: v for k, v in pruned.items() if v not in (None, {}, [], "")}
    if isinstance(value, list):
        return [_prune(v) for v in value]
    return value


class ReportingLogger:
    """Emits report records as structured log lines.

    Emission is best effort: a record that cannot be serialized or
    written is dropped without affecting the request.
    """

    def __init__(self) -> None:
        """Bind the report logger."""
        self._logger = structlog.get_logger(REPORT_LOGGER).bind(logger=REPORT_LOGGER)

    def log_query(self, log: QueryLog) -> None:
        self._log(log)

    def log_suggestion(self, log: SuggestionLog) -> None:
        self._log(log)

    def log_index(self, log: IndexLog) -> None:
        self._log(log)

    def _log(self, log: ReportLog) -> None:
        with contextlib.suppress(PydanticSerializationError, TypeError, ValueError, OSError):
            self._logger.info("report", **log.to_record())
