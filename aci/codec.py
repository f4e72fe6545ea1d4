"""
ACI Codec
=========
JSON text for interface descriptions.

Encoding takes an Ordered structure, whose keys are written exactly in
the order they were built, so output is stable across runs. Decoding
returns plain dicts: consumers look keys up and never rely on order.
"""
import json
from dataclasses import dataclass
from typing import Any

from .errors import MalformedInterface


@dataclass(frozen=True)
class Ordered:
    """A JSON object given as an explicit sequence of (key, value) pairs."""
    pairs: tuple[tuple[str, Any], ...]

    @classmethod
    def of(cls, *pairs: tuple[str, Any]) -> "Ordered":
        return cls(tuple(pairs))

    def keys(self) -> list[str]:
        return [k for k, _ in self.pairs]

    def __getitem__(self, key: str) -> Any:
        for k, v in self.pairs:
            if k == key:
                return v
        raise KeyError(key)

    def to_dict(self) -> dict:
        """Convert recursively to plain dicts and lists, keeping key order."""
        return {k: _plain(v) for k, v in self.pairs}


def _plain(value: Any) -> Any:
    if isinstance(value, Ordered):
        return value.to_dict()
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


class _OrderedEncoder(json.JSONEncoder):
    def default(self, o):
        if isinstance(o, Ordered):
            return dict(o.pairs)
        return super().default(o)


def dumps(structure: Ordered, indent: int | None = None) -> str:
    """Serialize an Ordered structure. Compact unless an indent is given."""
    if indent:
        return json.dumps(structure, cls=_OrderedEncoder, indent=indent, ensure_ascii=False)
    return json.dumps(structure, cls=_OrderedEncoder, separators=(",", ":"), ensure_ascii=False)


def loads(text: str | bytes) -> dict:
    """Parse interface text into a keyed mapping."""
    try:
        value = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedInterface(
            "", "$", f"invalid JSON ({e.msg}, line {e.lineno}, column {e.colno})",
        ) from e
    except UnicodeDecodeError as e:
        raise MalformedInterface("", "$", f"invalid UTF-8 at byte {e.start}") from e
    if not isinstance(value, dict):
        raise MalformedInterface("", "$", f"expected an object, got {type(value).__name__}")
    return value
