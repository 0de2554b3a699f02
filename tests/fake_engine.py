"""In-memory stand-in for the search engine used by the tests.

Understands the filter forms produced by chatsearch: exact ``field:value``,
``{!terms f=..}``, ``{!q.op=OR}field:(..)``, ``-field:*``, ``-[* TO *]``
and their negations. Free text matches when any term occurs in any field.
"""

import re
from typing import Any

from chatsearch.search.engine import EngineResult
from chatsearch.search.errors import EngineError
from chatsearch.search.params import Params

_UNESCAPED_SPACE = re.compile(r"(?<!\\) ")
_ESCAPE = re.compile(r"\\(.)")


def _unescape(value: str) -> str:
    return _ESCAPE.sub(r"\1", value)


def _values(doc: dict[str, Any], field: str) -> set[str]:
    value = doc.get(field)
    if value is None:
        return set()
    if isinstance(value, list):
        return {str(v) for v in value}
    return {str(value)}


def _split_names(values: list[str] | None) -> list[str]:
    names: list[str] = []
    for value in values or []:
        names.extend(n for n in value.replace(",", " ").split() if n)
    return names


def matches_filter(doc: dict[str, Any], fq: str) -> bool:
    negate = fq.startswith("-")
    body = fq[1:] if negate else fq

    if body.startswith("{!terms f="):
        field, _, raw = body[len("{!terms f=") :].partition("}")
        hit = bool(_values(doc, field) & {v for v in raw.split(",") if v})
    elif body.startswith("{!q.op=OR}"):
        field, _, group = body[len("{!q.op=OR}") :].partition(":(")
        wanted = {_unescape(v) for v in _UNESCAPED_SPACE.split(group.rstrip(")")) if v}
        hit = bool(_values(doc, field) & wanted)
    elif body == "[* TO *]":
        hit = True
    elif body.endswith(":*"):
        hit = body[:-2] in doc
    else:
        field, _, value = body.partition(":")
        hit = _unescape(value) in _values(doc, field)

    return hit != negate


def matches_text(doc: dict[str, Any], q: str | None) -> bool:
    if q is None or q == "*:*":
        return True
    haystack = " ".join(
        " ".join(map(str, v)) if isinstance(v, list) else str(v) for v in doc.values()
    ).lower()
    terms = [
        _unescape(t).strip('"*+').lower()
        for t in q.split()
        if t and not t.startswith("-")
    ]
    return any(t and t in haystack for t in terms)


class FakeEngine:
    """Evaluates composed queries against a list of documents.

    Attributes:
        docs: Indexed documents.
        queries: Every parameter bag passed to execute(), in call order.
        fail_types: Type values whose queries raise EngineError.
    """

    def __init__(self, docs: list[dict[str, Any]] | None = None) -> None:
        self.docs = list(docs or [])
        self.queries: list[Params] = []
        self.fail_types: set[str] = set()

    def queries_for(self, type_value: str) -> list[Params]:
        return [
            q for q in self.queries if f"type:{type_value}" in (q.get_list("fq") or [])
        ]

    async def execute(self, params: Params) -> EngineResult:
        self.queries.append(params)
        filters = params.get_list("fq") or []
        for type_value in self.fail_types:
            if f"type:{type_value}" in filters:
                raise EngineError(f"engine down for {type_value}", status_code=500)

        matched = [
            doc
            for doc in self.docs
            if matches_text(doc, params.get("q"))
            and all(matches_filter(doc, fq) for fq in filters)
        ]

        start = int(params.get("start", "0") or 0)
        rows = int(params.get("rows", "10") or 10)
        page = matched[start : start + rows]

        names = _split_names(params.get_list("fl"))
        wants_all = not names or "*" in names
        wants_score = "score" in names

        docs = []
        for doc in page:
            out = {k: v for k, v in doc.items() if wants_all or k in names}
            if wants_score:
                out["score"] = 1.0
            docs.append(out)

        highlighting = None
        hl_fields = _split_names(params.get_list("hl.fl"))
        if params.get("hl") == "true" and hl_fields:
            highlighting = {}
            for doc in page:
                snippets = {}
                for field in hl_fields:
                    if field in doc:
                        values = doc[field] if isinstance(doc[field], list) else [doc[field]]
                        snippets[field] = [f"<em>{v}</em>" for v in values]
                highlighting[str(doc["id"])] = snippets

        facet_counts = None
        if params.get("facet") == "true":
            facet_counts = {"facet_queries": {}, "facet_fields": {}}
            prefix = params.get("facet.prefix") or ""
            mincount = int(params.get("facet.mincount", "0") or 0)
            limit = int(params.get("facet.limit", "100") or 100)
            for field in params.get_list("facet.field") or []:
                counts: dict[str, int] = {}
                for doc in matched:
                    for value in _values(doc, field):
                        if value.startswith(prefix):
                            counts[value] = counts.get(value, 0) + 1
                ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
                flat: list[Any] = []
                for term, count in ranked[:limit]:
                    if count >= mincount:
                        flat.extend([term, count])
                facet_counts["facet_fields"][field] = flat

        facets = {"count": len(matched)} if params.get("json.facet") else None

        return EngineResult(
            docs=docs,
            num_found=len(matched),
            start=start,
            max_score=1.0 if wants_score and matched else None,
            facet_counts=facet_counts,
            facets=facets,
            highlighting=highlighting,
        )
