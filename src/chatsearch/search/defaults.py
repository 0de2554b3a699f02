"""Default parameter layers loaded once at startup."""
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import structlog
import yaml

from chatsearch.search.categories import DocumentCategory
from chatsearch.search.errors import ConfigurationError
from chatsearch.search.params import Params

logger = structlog.get_logger()

_BUILTIN_DEFAULTS: dict[str, Any] = {
    "defaults": {
        "defType": "edismax",
        "fl": "*,score",
        "rows": "10",
        "hl": "true",
        "hl.method": "unified",
    },
    "message": {
        "fl": "id,rid,user,username,name,text,updated,created,type",
        "hl.fl": "text",
    },
    "room": {
        "qf": "room_name^2 room_announcement room_description room_topic",
        "fl": "id,rid,room_name,room_announcement,room_description,room_topic,type",
        "hl.fl": "room_name room_announcement room_description room_topic",
    },
    "user": {
        "qf": "user_username^2 user_name user_email",
        "fl": "id,user_username,user_name,user_email,type",
        "hl.fl": "user_username user_name user_email",
    },
    "file": {
        "qf": "file_name^2 file_desc^1 file_content",
        "fl": "id,rid,file_name,file_desc,file_type,updated,created,type",
        "hl.fl": "file_name file_desc file_content",
    },
    "schema": {
        "unique_key": "id",
        "single_valued_fields": [
            "rid",
            "user",
            "username",
            "name",
            "text",
            "updated",
            "created",
            "type",
            "room_name",
            "room_announcement",
            "room_description",
            "room_topic",
            "user_username",
            "user_name",
            "user_email",
            "file_name",
            "file_desc",
            "file_type",
        ],
    },
}


@dataclass(frozen=True)
class QueryDefaults:
    """Default parameter layers, immutable once loaded.

    Attributes:
        global_defaults: Parameters applied to every category.
        category_defaults: Per-category parameters keyed by category.
        unique_key: Engine unique-id field used to correlate highlights.
        single_valued_fields: Fields that hold at most one value.
    """

    global_defaults: Params = field(default_factory=Params)
    category_defaults: Mapping[DocumentCategory, Params] = field(
        default_factory=lambda: MappingProxyType({})
    )
    unique_key: str = "id"
    single_valued_fields: frozenset[str] = frozenset()

    def for_category(self, category: DocumentCategory) -> Params | None:
        """Category default layer, or None when not configured."""
        return self.category_defaults.get(category)

    def is_multi_valued(self, field_name: str) -> bool:
        """Fields not declared single-valued are treated as multi-valued."""
        return field_name not in self.single_valued_fields

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "QueryDefaults":
        """Build defaults from a parsed configuration mapping.

        Args:
            data: Mapping with ``defaults``, per-category keys and ``schema``.

        Returns:
            Frozen query defaults.

        Raises:
            ConfigurationError: If a section has the wrong shape.
        """
        global_section = _section(data, "defaults")
        category_defaults = {
            category: Params.from_mapping(_section(data, category.key))
            for category in DocumentCategory
            if data.get(category.key) is not None
        }

        schema = _section(data, "schema")
        unique_key = str(schema.get("unique_key") or "").strip()
        if not unique_key:
            raise ConfigurationError("schema.unique_key MUST NOT be blank")
        single_valued = schema.get("single_valued_fields") or []
        if not isinstance(single_valued, list):
            raise ConfigurationError("schema.single_valued_fields must be a list")

        return cls(
            global_defaults=Params.from_mapping(global_section),
            category_defaults=MappingProxyType(category_defaults),
            unique_key=unique_key,
            single_valued_fields=frozenset(str(f) for f in single_valued),
        )


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = data.get(name)
    if section is None:
        return {}
    if not isinstance(section, Mapping):
        raise ConfigurationError(f"Section '{name}' must be a mapping")
    return section


def load_query_defaults(path: str | None) -> QueryDefaults:
    """Load default parameter layers from YAML, or the built-in set.

    Args:
        path: Path to the YAML defaults file, or None for built-ins.

    Returns:
        Frozen query defaults.

    Raises:
        ConfigurationError: If the file cannot be read or parsed.
    """
    if path is None:
        return QueryDefaults.from_mapping(_BUILTIN_DEFAULTS)

    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot read defaults file {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Defaults file {path} must contain a mapping")

    defaults = QueryDefaults.from_mapping(data)
    logger.info(
        "query_defaults_loaded",
        path=path,
        categories=[c.key for c in defaults.category_defaults],
    )
    return defaults
