"""Schemas that decode raw tool arguments into typed values.

A schema renders a JSON-schema document advertised to the model and parses
the raw argument text the model sends back. Parsing never raises for bad
input; it returns a ``ValidationOutcome`` that is either ``Valid`` with the
decoded value or ``Invalid`` with every issue pydantic reported.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Protocol, TypeAlias, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from toolchat.schema.wire import JsonDocument, freeze_document

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)
M = TypeVar("M", bound=BaseModel)


@dataclass(frozen=True, slots=True)
class Issue:
    """Single validation problem at a location inside the payload."""

    location: tuple[str | int, ...]
    message: str

    @property
    def path(self) -> str:
        if not self.location:
            return "<root>"
        return ".".join(str(part) for part in self.location)


@dataclass(frozen=True, slots=True)
class Valid(Generic[T]):
    value: T


@dataclass(frozen=True, slots=True)
class Invalid:
    issues: tuple[Issue, ...]

    def __post_init__(self) -> None:
        if not self.issues:
            raise ValueError("invalid outcome requires at least one issue")


ValidationOutcome: TypeAlias = Valid[T] | Invalid


class Schema(Protocol[T_co]):
    """Shape of a tool input: documents itself and decodes raw argument text."""

    @property
    def output_type(self) -> Any:
        """Python type produced by ``parse`` on success."""

    def document(self) -> JsonDocument:
        """Return the read-only JSON-schema document."""

    def parse(self, raw: str | bytes) -> Valid[T_co] | Invalid:
        """Decode ``raw`` JSON text."""


class ModelSchema(Generic[M]):
    """Schema backed by a pydantic model class."""

    def __init__(self, model: type[M]) -> None:
        self.model = model
        self._document = freeze_document(model.model_json_schema())

    @property
    def output_type(self) -> type[M]:
        return self.model

    def document(self) -> JsonDocument:
        return self._document

    def parse(self, raw: str | bytes) -> Valid[M] | Invalid:
        try:
            return Valid(self.model.model_validate_json(_normalize_raw(raw)))
        except ValidationError as exc:
            return Invalid(issues_from_error(exc))

    def __repr__(self) -> str:
        return f"ModelSchema({self.model.__name__})"


class TypeAdapterSchema(Generic[T]):
    """Schema for any type pydantic can adapt (TypedDict, dataclass, ...)."""

    def __init__(self, type_: type[T] | Any) -> None:
        self.type_ = type_
        self._adapter: TypeAdapter[T] = TypeAdapter(type_)
        self._document = freeze_document(self._adapter.json_schema())

    @property
    def output_type(self) -> Any:
        return self.type_

    def document(self) -> JsonDocument:
        return self._document

    def parse(self, raw: str | bytes) -> Valid[T] | Invalid:
        try:
            return Valid(self._adapter.validate_json(_normalize_raw(raw)))
        except ValidationError as exc:
            return Invalid(issues_from_error(exc))

    def __repr__(self) -> str:
        return f"TypeAdapterSchema({self.type_!r})"


def issues_from_error(exc: ValidationError) -> tuple[Issue, ...]:
    return tuple(
        Issue(location=tuple(error.get("loc", ())), message=error.get("msg", "invalid value"))
        for error in exc.errors(include_url=False)
    )


def _normalize_raw(raw: str | bytes) -> str | bytes:
    # Models send an empty string for argument-less calls.
    if not raw.strip():
        return "{}"
    return raw


__all__ = [
    "Invalid",
    "Issue",
    "ModelSchema",
    "Schema",
    "TypeAdapterSchema",
    "Valid",
    "ValidationOutcome",
    "issues_from_error",
]
