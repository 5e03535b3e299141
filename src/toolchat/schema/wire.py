"""Conversion between immutable schema documents and JSON wire values.

Schema documents are kept as read-only structures (``MappingProxyType`` and
``tuple``) so a registered tool's schema cannot be mutated after
registration. The transport needs plain ``dict``/``list`` values; these two
functions map between the representations node by node.

Numeric policy: ``bool`` is never collapsed into ``int``, ``int`` stays an
unbounded Python ``int`` and ``float`` stays ``float``. Non-finite floats are
rejected because JSON cannot encode them.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from enum import Enum
from types import MappingProxyType
from typing import Any, TypeAlias

JsonScalar: TypeAlias = None | bool | int | float | str
JsonValue: TypeAlias = JsonScalar | list["JsonValue"] | dict[str, "JsonValue"]
FrozenJson: TypeAlias = JsonScalar | tuple["FrozenJson", ...] | Mapping[str, "FrozenJson"]
JsonDocument: TypeAlias = Mapping[str, FrozenJson]


class WireValueError(ValueError):
    """Raised when a value cannot be represented on the wire."""


def from_wire(value: Any) -> FrozenJson:
    """Freeze a JSON value into the internal read-only representation."""

    if isinstance(value, Mapping):
        return MappingProxyType({_key(k): from_wire(v) for k, v in value.items()})
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return tuple(from_wire(item) for item in value)
    return _scalar(value)


def to_wire(value: Any) -> JsonValue:
    """Thaw an internal value into plain JSON-encodable ``dict``/``list`` values."""

    if isinstance(value, Mapping):
        return {_key(k): to_wire(v) for k, v in value.items()}
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return [to_wire(item) for item in value]
    return _scalar(value)


def freeze_document(document: Mapping[str, Any]) -> JsonDocument:
    frozen = from_wire(document)
    assert isinstance(frozen, Mapping)
    return frozen


def _key(key: Any) -> str:
    if isinstance(key, Enum):
        key = key.value
    if not isinstance(key, str):
        raise TypeError(f"mapping keys must be strings, got {type(key).__name__}")
    return str.__str__(key)


def _scalar(value: Any) -> JsonScalar:
    if isinstance(value, Enum):
        return _scalar(value.value)
    if value is None:
        return None
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return bool(value)
    if isinstance(value, int):
        return int(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise WireValueError(f"non-finite float {value!r} cannot be sent")
        return float(value)
    if isinstance(value, str):
        return str.__str__(value)
    raise TypeError(f"unsupported wire value type: {type(value).__name__}")


__all__ = [
    "FrozenJson",
    "JsonDocument",
    "JsonScalar",
    "JsonValue",
    "WireValueError",
    "freeze_document",
    "from_wire",
    "to_wire",
]
