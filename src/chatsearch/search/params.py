"""Multi-valued request parameters and their layered resolution."""

from collections.abc import Iterable, Iterator, Mapping, Sequence
from typing import Any


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class Params:
    """Ordered bag of parameters where every key holds a list of strings.

    Setting a key to no values (or only None) removes it, so an unset
    attribute lets lower layers provide the value.
    """

    def __init__(self, data: Mapping[str, Sequence[str]] | None = None) -> None:
        self._data: dict[str, list[str]] = {}
        if data:
            for key, values in data.items():
                self.set(key, *values)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "Params":
        """Build parameters from plain configuration values.

        Scalars become single values, lists become repeated values.
        """
        params = cls()
        for key, value in mapping.items():
            if isinstance(value, (list, tuple)):
                params.set(str(key), *(_stringify(v) for v in value if v is not None))
            elif value is not None:
                params.set(str(key), _stringify(value))
        return params

    @classmethod
    def from_items(cls, items: Iterable[tuple[str, str]]) -> "Params":
        """Build parameters from (key, value) pairs, keeping repeats."""
        params = cls()
        for key, value in items:
            params.add(key, value)
        return params

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Params):
            return NotImplemented
        return self._data == other._data

    def __repr__(self) -> str:
        return f"Params({self._data!r})"

    def get(self, key: str, default: str | None = None) -> str | None:
        values = self._data.get(key)
        if not values:
            return default
        return values[0]

    def get_list(self, key: str) -> list[str] | None:
        values = self._data.get(key)
        return list(values) if values is not None else None

    def set(self, key: str, *values: str | None) -> "Params":
        kept = [v for v in values if v is not None]
        if kept:
            self._data[key] = kept
        else:
            self._data.pop(key, None)
        return self

    def add(self, key: str, *values: str | None) -> "Params":
        kept = [v for v in values if v is not None]
        if kept:
            self._data.setdefault(key, []).extend(kept)
        return self

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def items(self) -> list[tuple[str, str]]:
        """Flatten to (key, value) pairs with repeated keys."""
        return [(key, value) for key, values in self._data.items() for value in values]

    def to_dict(self) -> dict[str, list[str]]:
        return {key: list(values) for key, values in self._data.items()}

    def copy(self) -> "Params":
        return Params(self._data)


class LayeredParams:
    """Resolves parameters against an ordered chain of layers.

    The first layer that defines a key wins; later layers are only
    consulted when all earlier ones lack the key. Values of the
    ``appended`` layer are added after resolution instead of competing
    with the chain. Layers are never modified.

    Attributes:
        layers: Lookup sources in precedence order. ``None`` entries
            stand for absent layers and are skipped.
        appended: Parameters whose values are appended to the result.
    """

    def __init__(
        self,
        layers: Sequence[Params | None],
        appended: Params | None = None,
    ) -> None:
        self.layers = [layer for layer in layers if layer is not None]
        self.appended = appended or Params()

    def _owner(self, key: str) -> Params | None:
        for layer in self.layers:
            if key in layer:
                return layer
        return None

    def get(self, key: str, default: str | None = None) -> str | None:
        """Resolve a single value, or ``default`` if no layer defines it."""
        values = self.get_list(key)
        if not values:
            return default
        return values[0]

    def get_list(self, key: str) -> list[str] | None:
        """Resolve all values of a key, including appended ones."""
        owner = self._owner(key)
        values = owner.get_list(key) if owner is not None else None
        extra = self.appended.get_list(key)
        if extra:
            values = (values or []) + extra
        return values

    def __contains__(self, key: str) -> bool:
        return self._owner(key) is not None or key in self.appended

    def keys(self) -> list[str]:
        seen: dict[str, None] = {}
        for layer in [*self.layers, self.appended]:
            for key in layer:
                seen.setdefault(key, None)
        return list(seen)

    def to_params(self) -> Params:
        """Flatten the chain into one parameter bag."""
        flat = Params()
        for key in self.keys():
            flat.set(key, *(self.get_list(key) or []))
        return flat
