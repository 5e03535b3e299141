"""Input schemas for tools and their wire representation."""

from __future__ import annotations

from .base import (  # noqa: F401
    Invalid,
    Issue,
    ModelSchema,
    Schema,
    TypeAdapterSchema,
    Valid,
    ValidationOutcome,
    issues_from_error,
)
from .wire import (  # noqa: F401
    FrozenJson,
    JsonDocument,
    JsonValue,
    WireValueError,
    freeze_document,
    from_wire,
    to_wire,
)
