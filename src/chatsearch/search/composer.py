"""Builds the type-scoped sub-query for one document category."""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

import structlog

from chatsearch.search.categories import DocumentCategory
from chatsearch.search.defaults import QueryDefaults
from chatsearch.search.filters import (
    FIELD_MSG_ID,
    FIELD_ROOM_ID,
    PARAM_EXCL_MSG,
    PARAM_EXCL_ROOM,
    PARAM_TYPE,
    build_acl_filter,
    build_exclusion_filter,
    build_type_filter,
    get_multi_value_param,
)
from chatsearch.search.highlight import LANG_NONE, ReturnFields, suffix
from chatsearch.search.params import LayeredParams, Params
from chatsearch.search.querytext import sanitize

logger = structlog.get_logger()

PARAM_TEXT = "text"
PARAM_QUERY = "query"
PARAM_LANG = "language"
PARAM_START = "start"
PARAM_ROWS = "rows"
PARAM_SORT = "sort"

# Caller parameters forwarded to the engine as-is.
PASSTHROUGH_PARAMS = (
    "fl",
    "hl",
    "facet",
    "facet.field",
    "facet.query",
    "facet.limit",
    "facet.mincount",
)

RECENCY_BOOST = "recip(ms(NOW,updated),3.6e-11,3,1)"


class AdapterKind(Enum):
    """Category-specific mutation applied to a composed query."""

    LANGUAGE_WEIGHT = "language_weight"
    RECENCY_BOOST = "recency_boost"
    FORCE_NO_LANGUAGE = "force_no_language"
    ACL = "acl"
    EXCLUSION = "exclusion"


CATEGORY_ADAPTERS: dict[DocumentCategory, tuple[AdapterKind, ...]] = {
    DocumentCategory.MESSAGE: (
        AdapterKind.LANGUAGE_WEIGHT,
        AdapterKind.RECENCY_BOOST,
        AdapterKind.ACL,
        AdapterKind.EXCLUSION,
    ),
    DocumentCategory.FILE: (
        AdapterKind.FORCE_NO_LANGUAGE,
        AdapterKind.RECENCY_BOOST,
        AdapterKind.ACL,
        AdapterKind.EXCLUSION,
    ),
    DocumentCategory.ROOM: (
        AdapterKind.ACL,
        AdapterKind.EXCLUSION,
    ),
    DocumentCategory.USER: (AdapterKind.ACL,),
}


@dataclass(frozen=True)
class QueryContext:
    """Request-scoped inputs shared by all adapter steps.

    Attributes:
        request: Caller parameters.
        category: Category being queried.
        language: Caller language tag.
        structured: Whether the caller supplied a native ``query``.
    """

    request: Params
    category: DocumentCategory
    language: str
    structured: bool


@dataclass(frozen=True)
class TypeQuery:
    """Composed sub-query ready for execution.

    Attributes:
        category: Category the query is scoped to.
        params: Flattened parameters after layered defaulting.
        language: Language whose suffix highlighted fields carry.
        return_fields: Projection applied to returned documents.
    """

    category: DocumentCategory
    params: Params
    language: str
    return_fields: ReturnFields


def _language_weight(query: Params, ctx: QueryContext) -> None:
    if ctx.structured:
        query.set("df", suffix("text", ctx.language))
        return
    query.set(
        "qf",
        f"context^2 {suffix('text', ctx.language)}^1 "
        f"{suffix('decompose_text', ctx.language)}^.5",
    )
    query.add("hl.fl", suffix("text", ctx.language))


def _recency_boost(query: Params, ctx: QueryContext) -> None:
    if not ctx.structured:
        query.set("bf", RECENCY_BOOST)


def _force_no_language(query: Params, ctx: QueryContext) -> None:
    # files carry no language specific text
    query.set(PARAM_LANG, LANG_NONE)


def _acl(query: Params, ctx: QueryContext) -> None:
    query.add("fq", build_acl_filter(ctx.request))


def _exclusion(query: Params, ctx: QueryContext) -> None:
    if ctx.category in (DocumentCategory.MESSAGE, DocumentCategory.ROOM):
        query.add(
            "fq",
            build_exclusion_filter(
                FIELD_ROOM_ID, get_multi_value_param(PARAM_EXCL_ROOM, ctx.request)
            ),
        )
    if ctx.category is DocumentCategory.MESSAGE:
        query.add(
            "fq",
            build_exclusion_filter(
                FIELD_MSG_ID, get_multi_value_param(PARAM_EXCL_MSG, ctx.request)
            ),
        )


_ADAPTER_STEPS: dict[AdapterKind, Callable[[Params, QueryContext], None]] = {
    AdapterKind.LANGUAGE_WEIGHT: _language_weight,
    AdapterKind.RECENCY_BOOST: _recency_boost,
    AdapterKind.FORCE_NO_LANGUAGE: _force_no_language,
    AdapterKind.ACL: _acl,
    AdapterKind.EXCLUSION: _exclusion,
}


def apply_adapters(
    query: Params, ctx: QueryContext, adapters: tuple[AdapterKind, ...]
) -> None:
    """Apply adapter steps to the query in order."""
    for kind in adapters:
        _ADAPTER_STEPS[kind](query, ctx)


def type_filter_accepts(request: Params, category: DocumentCategory) -> bool:
    """Whether the caller's ``type`` parameter selects the category.

    An absent or empty ``type`` selects every category.
    """
    types = [t for t in get_multi_value_param(PARAM_TYPE, request) or [] if t]
    return not types or category.key in types


def _type_param(category: DocumentCategory, name: str) -> str:
    return f"{category.key}.{name}"


def compose(
    category: DocumentCategory,
    request: Params,
    defaults: QueryDefaults,
) -> TypeQuery:
    """Compose the sub-query for one category.

    Args:
        category: Category to query.
        request: Caller parameters.
        defaults: Immutable default parameter layers.

    Returns:
        The layered, flattened sub-query.
    """
    language = request.get(PARAM_LANG, LANG_NONE) or LANG_NONE
    structured_query = request.get(PARAM_QUERY)
    ctx = QueryContext(
        request=request,
        category=category,
        language=language,
        structured=structured_query is not None,
    )

    query = Params()
    if ctx.structured:
        # a native query bypasses edismax and the text sanitizer
        query.set("defType", "lucene")
        query.set("q", structured_query)
    else:
        query.set("q", sanitize(request.get(PARAM_TEXT)))

    query.set(PARAM_SORT, request.get(PARAM_SORT))
    for name in PASSTHROUGH_PARAMS:
        query.set(name, *(request.get_list(name) or []))

    query.set("fq", build_type_filter(category))
    query.add("fq", *(request.get_list("fq") or []))

    query.set(
        PARAM_START,
        request.get(_type_param(category, PARAM_START), request.get(PARAM_START)),
    )
    query.set(
        PARAM_ROWS,
        request.get(_type_param(category, PARAM_ROWS), request.get(PARAM_ROWS)),
    )

    apply_adapters(query, ctx, CATEGORY_ADAPTERS[category])

    layers = [query, defaults.for_category(category), defaults.global_defaults]

    # the unique key correlates highlighting with documents
    appended = Params()
    if not any(layer is not None and "fl" in layer for layer in layers):
        appended.add("fl", "*")
    appended.add("fl", defaults.unique_key)

    layered = LayeredParams(layers, appended=appended)
    params = layered.to_params()
    logger.debug("type_query_composed", category=category.key, params=params.items())

    return TypeQuery(
        category=category,
        params=params,
        language=params.get(PARAM_LANG, language) or language,
        return_fields=ReturnFields(params.get_list("fl")),
    )
