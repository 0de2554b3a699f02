"""Shapes an engine result into the per-category response envelope."""

from typing import Any

from chatsearch.search.composer import TypeQuery
from chatsearch.search.defaults import QueryDefaults
from chatsearch.search.engine import EngineResult
from chatsearch.search.highlight import (
    first_value,
    inline_highlighting,
    remap_language_fields,
)


def materialize_document(
    doc: dict[str, Any],
    result: EngineResult,
    query: TypeQuery,
    defaults: QueryDefaults,
) -> dict[str, Any]:
    """Inline highlights and apply the projection to one document.

    Args:
        doc: Document as returned by the engine.
        result: Engine result holding the highlight map.
        query: Sub-query the document was returned for.
        defaults: Defaults holding the unique key and field cardinality.

    Returns:
        A new document without unwanted fields or the unique key.
    """
    out = dict(doc)
    unique_key = defaults.unique_key

    if result.highlighting is not None:
        doc_id = first_value(out.get(unique_key))
        if doc_id is not None:
            inline_highlighting(
                out,
                result.highlighting.get(str(doc_id)),
                query.return_fields,
                query.language,
                defaults.is_multi_valued,
            )

    remap_language_fields(out, query.return_fields, query.language)

    for name in list(out):
        if not query.return_fields.wants_field(name):
            del out[name]

    out.pop(unique_key, None)
    return out


def materialize_result(
    result: EngineResult,
    query: TypeQuery,
    defaults: QueryDefaults,
) -> dict[str, Any]:
    """Build the ``docs``/``numFound``/``start`` envelope for one category.

    ``maxScore`` is only present when scores were requested and
    ``facets`` only when the sub-query produced facet counts.
    """
    envelope: dict[str, Any] = {
        "docs": [materialize_document(d, result, query, defaults) for d in result.docs],
        "numFound": result.num_found,
        "start": result.start,
    }
    if result.max_score is not None and query.return_fields.wants_score:
        envelope["maxScore"] = result.max_score
    if result.facet_counts is not None:
        envelope["facets"] = result.facet_counts
    return envelope
