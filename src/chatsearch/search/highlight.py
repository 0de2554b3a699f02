"""Language-suffixed field names and return-field projections."""

from collections.abc import Callable, Iterable
from typing import Any

LANG_NONE = "none"


def suffix(field: str, language: str) -> str:
    """Language-specific field name, e.g. ``text`` -> ``text_en``."""
    return f"{field}_{language}"


def unsuffix(field: str, language: str) -> str:
    """Logical field name, e.g. ``text_en`` -> ``text``.

    Names without the language suffix are returned unchanged.
    """
    end = f"_{language}"
    if field.endswith(end):
        return field[: -len(end)]
    return field


def first_value(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    return value


class ReturnFields:
    """Field projection parsed from ``fl`` parameter values.

    ``*`` wants every field; ``score`` is a pseudo-field and is always
    wanted when requested. Glob patterns such as ``room_*`` are honoured.
    """

    def __init__(self, fl_values: Iterable[str] | None) -> None:
        names: list[str] = []
        for value in fl_values or []:
            names.extend(n for n in value.replace(",", " ").split() if n)
        self._all = not names or "*" in names
        self._names = frozenset(n for n in names if "*" not in n)
        self._globs = tuple(n[:-1] for n in names if n.endswith("*") and n != "*")
        self.wants_score = "score" in self._names

    def wants_field(self, name: str) -> bool:
        if self._all or name in self._names:
            return True
        return any(name.startswith(prefix) for prefix in self._globs)


def inline_highlighting(
    doc: dict[str, Any],
    highlights: dict[str, Any] | None,
    return_fields: ReturnFields,
    language: str,
    is_multi_valued: Callable[[str], bool],
) -> None:
    """Overwrite document fields with their highlight snippets.

    Args:
        doc: Document to update in place.
        highlights: Snippets of this document keyed by engine field name.
        return_fields: Projection requested by the caller.
        language: Language suffix to strip from highlighted field names.
        is_multi_valued: Predicate telling whether a field is multi-valued.
    """
    if not highlights:
        return

    for field_name, snippets in highlights.items():
        target = unsuffix(field_name, language)
        if not return_fields.wants_field(target):
            continue

        if is_multi_valued(target):
            doc[target] = snippets
        else:
            first = first_value(snippets)
            if first is not None:
                doc[target] = first


def remap_language_fields(
    doc: dict[str, Any],
    return_fields: ReturnFields,
    language: str,
) -> None:
    """Replace stored ``<field>_<language>`` keys by their logical names.

    Logical fields already present, such as highlighted ones, keep their
    value. Suffixed keys never remain in the document.
    """
    if language == LANG_NONE:
        return

    end = f"_{language}"
    for name in [n for n in doc if n.endswith(end)]:
        value = doc.pop(name)
        target = unsuffix(name, language)
        if target not in doc and return_fields.wants_field(target):
            doc[target] = value
