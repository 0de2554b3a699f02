"""Pydantic schemas for search API responses."""

from typing import Any

from pydantic import BaseModel


class CategoryResult(BaseModel):
    """Results of one document category.

    Attributes:
        docs: Matched documents with highlights inlined.
        numFound: Total number of matching documents.
        start: Offset of the first returned document.
        maxScore: Highest relevance score, when scores were requested.
        facets: Facet counts, when the category query requested them.
    """

    docs: list[dict[str, Any]]
    numFound: int
    start: int
    maxScore: float | None = None
    facets: dict[str, Any] | None = None


class Suggestion(BaseModel):
    """Completion of the typed phrase with its document count."""

    text: str
    count: int


class SuggestionResponse(BaseModel):
    suggestion: list[Suggestion]


class PingResponse(BaseModel):
    """Service status with optional schema version, stats and config."""

    status: str = "OK"
    schemaVersion: str | None = None
    stats: dict[str, Any] | None = None
    config: dict[str, Any] | None = None
