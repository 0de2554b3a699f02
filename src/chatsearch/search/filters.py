"""Filter-query fragments for ACL, exclusion and type restrictions."""

from collections.abc import Sequence

from chatsearch.search.categories import DocumentCategory
from chatsearch.search.errors import InvalidArgumentError
from chatsearch.search.params import Params
from chatsearch.search.querytext import escape_query_chars

PARAM_ACL = "acl"
PARAM_TYPE = "type"
PARAM_EXCL_MSG = "excl.msg"
PARAM_EXCL_ROOM = "excl.room"
LEGACY_PARAM_SUFFIX = "[]"

FIELD_MSG_ID = "id"
FIELD_ROOM_ID = "rid"
FIELD_ACL = FIELD_ROOM_ID
FIELD_TYPE = "type"


def build_terms_filter(field: str | None, values: Sequence[str | None] | None) -> str:
    """Build a terms filter that matches any of the given values.

    No values yields an empty terms filter, which matches no documents.
    Values are assumed to be identifiers and are not escaped.

    Args:
        field: Field to filter on. MUST NOT be None or blank.
        values: Term values; None and blank entries are dropped.

    Returns:
        Filter of the form ``{!terms f=<field>}v1,v2``.

    Raises:
        InvalidArgumentError: If field is None or blank.
    """
    if field is None or not field.strip():
        raise InvalidArgumentError("The filter field MUST NOT be None nor blank")

    terms = ",".join(v for v in values or [] if v is not None and v.strip())
    return f"{{!terms f={field}}}{terms}"


def build_or_filter(field: str | None, values: Sequence[str | None] | None) -> str:
    """Build an OR query over escaped values.

    Args:
        field: Field to query; None or blank targets the default field.
        values: Values to OR together; None and blank entries are dropped.

    Returns:
        ``{!q.op=OR}<field>:(v1 v2)``, or a filter matching nothing
        (``-<field>:*`` / ``-[* TO *]``) when no values are given.
    """
    blank_field = field is None or not field.strip()
    kept = [v for v in values or [] if v is not None and v.strip()]
    if not kept:
        return "-[* TO *]" if blank_field else f"-{field}:*"

    terms = " ".join(escape_query_chars(v) for v in kept)
    target = "" if blank_field else f"{field}:"
    return f"{{!q.op=OR}}{target}({terms})"


def get_multi_value_param(name: str, params: Params) -> list[str] | None:
    """Read a repeatable parameter in either supported encoding.

    The comma-joined form (``name=a,b``) wins over the legacy form
    (``name[]=a&name[]=b``) when both are present.

    Args:
        name: Parameter name without the ``[]`` suffix.
        params: Request parameters.

    Returns:
        The values, or None if neither encoding is present.
    """
    values = params.get_list(name)
    if values is not None:
        return [part for value in values for part in value.split(",")]
    return params.get_list(name + LEGACY_PARAM_SUFFIX)


def build_type_filter(category: DocumentCategory) -> str:
    return f"{FIELD_TYPE}:{category.index_value}"


def build_acl_filter(params: Params) -> str:
    """Restrict results to the caller's ACL tokens, matching nothing without any."""
    return build_or_filter(FIELD_ACL, get_multi_value_param(PARAM_ACL, params))


def build_exclusion_filter(field: str, excluded: Sequence[str] | None) -> str | None:
    """Negated terms filter, or None when nothing is excluded."""
    if not excluded:
        return None
    return "-" + build_terms_filter(field, excluded)
