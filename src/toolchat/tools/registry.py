"""Tool registry binding names to input schemas and handlers.

A ``ToolRegistration`` ties one schema to one handler at construction time,
so the decoded value a schema produces is the value its handler receives.
Registrations differ in that decoded type; the registry stores them behind
the ``RegisteredTool`` protocol, which only deals in schema documents and raw
argument text.
"""

from __future__ import annotations

import inspect
import json
import logging
import re
import typing
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, Protocol, TypeVar

from toolchat.openai_client.types import ToolDefinition
from toolchat.schema.base import Invalid, Issue, Schema
from toolchat.schema.wire import JsonDocument

if TYPE_CHECKING:
    from toolchat.tools.base import Tool

T = TypeVar("T")

Handler = Callable[[T], Awaitable[str] | str]

TOOL_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


class ToolInvocationError(Exception):
    """Base class for failures while invoking a registered tool."""

    def __init__(self, tool_name: str, message: str) -> None:
        super().__init__(message)
        self.tool_name = tool_name


class UnknownToolError(ToolInvocationError):
    """Raised when a tool name is not registered."""

    def __init__(self, tool_name: str) -> None:
        super().__init__(tool_name, f"unknown tool {tool_name}")


class InvalidArgumentsError(ToolInvocationError):
    """Raised when tool arguments fail schema validation."""

    def __init__(self, tool_name: str, issues: tuple[Issue, ...]) -> None:
        details = "; ".join(f"{issue.path}: {issue.message}" for issue in issues)
        super().__init__(tool_name, f"invalid arguments for tool {tool_name}: {details}")
        self.issues = issues


class ToolHandlerError(ToolInvocationError):
    """Raised when a tool handler fails."""

    def __init__(self, tool_name: str, cause: Exception) -> None:
        super().__init__(tool_name, f"tool {tool_name} failed: {cause}")
        self.cause = cause


class DuplicateToolError(ValueError):
    """Raised when a tool name is registered twice."""


class ToolSignatureError(TypeError):
    """Raised when a handler cannot accept what its schema decodes."""


class RegisteredTool(Protocol):
    """Type-erased view of a tool held by the registry."""

    @property
    def name(self) -> str: ...

    @property
    def description(self) -> str | None: ...

    def document(self) -> JsonDocument: ...

    async def call(self, arguments: str) -> str: ...


@dataclass(frozen=True)
class ToolRegistration(Generic[T]):
    name: str
    schema: Schema[T]
    handler: Handler[T]
    description: str | None = None

    def __post_init__(self) -> None:
        if not TOOL_NAME_PATTERN.match(self.name):
            raise ValueError(f"invalid tool name {self.name!r}: use 1-64 letters, digits, '_' or '-'")
        if self.description is not None and not self.description.strip():
            raise ValueError("tool description cannot be blank")
        _check_handler(self.name, self.schema, self.handler)

    def document(self) -> JsonDocument:
        return self.schema.document()

    async def call(self, arguments: str) -> str:
        outcome = self.schema.parse(arguments)
        if isinstance(outcome, Invalid):
            raise InvalidArgumentsError(self.name, outcome.issues)

        try:
            result = self.handler(outcome.value)
            if inspect.isawaitable(result):
                result = await result
        except Exception as exc:
            raise ToolHandlerError(self.name, exc) from exc

        if not isinstance(result, str):
            raise ToolHandlerError(self.name, TypeError(f"handler returned {type(result).__name__}, expected str"))
        return result


class ToolRegistry:
    """Name-keyed tools with listing for the model and dispatch by name.

    Populate during startup; afterwards the registry is only read.
    """

    def __init__(
        self,
        registrations: Iterable[RegisteredTool] = (),
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._tools: dict[str, RegisteredTool] = {}
        self.logger = logger
        for registration in registrations:
            self.add(registration)

    def register(
        self,
        name: str,
        schema: Schema[T],
        handler: Handler[T],
        *,
        description: str | None = None,
    ) -> ToolRegistration[T]:
        """Bind ``name`` to ``schema`` and ``handler``; duplicate names are rejected."""

        registration = ToolRegistration(name=name, schema=schema, handler=handler, description=description)
        self.add(registration)
        return registration

    def register_tool(self, tool: Tool[Any]) -> RegisteredTool:
        return self.add(tool.registration())

    def add(self, registration: RegisteredTool) -> RegisteredTool:
        if registration.name in self._tools:
            raise DuplicateToolError(f"tool {registration.name} is already registered")
        self._tools[registration.name] = registration
        return registration

    def get(self, name: str) -> RegisteredTool:
        tool = self._tools.get(name)
        if tool is None:
            raise UnknownToolError(name)
        return tool

    def names(self) -> list[str]:
        return sorted(self._tools)

    def definitions(self) -> list[ToolDefinition]:
        """Return tool definitions sorted by name."""

        return [
            ToolDefinition(name=tool.name, description=tool.description, parameters=tool.document())
            for tool in sorted(self._tools.values(), key=lambda tool: tool.name)
        ]

    async def invoke(self, name: str, arguments: str) -> str:
        tool = self.get(name)
        self._log_request(name, arguments)
        try:
            result = await tool.call(arguments)
        except ToolInvocationError as exc:
            self._log_response(name, {"error": str(exc)})
            raise
        self._log_response(name, result)
        return result

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def _log_request(self, name: str, arguments: str) -> None:
        if not self.logger:
            return
        self.logger.info("tool request: %s args=%s", name, _truncate(arguments))

    def _log_response(self, name: str, result: Any) -> None:
        if not self.logger:
            return
        self.logger.debug("tool response: %s result=%s", name, self._stringify(result))

    @staticmethod
    def _stringify(obj: Any) -> str:
        if isinstance(obj, str):
            return _truncate(obj)
        try:
            text = json.dumps(obj, default=str)
        except (TypeError, ValueError):
            text = repr(obj)
        return _truncate(text)


def _truncate(text: str, limit: int = 2000) -> str:
    if len(text) > limit:
        return f"{text[:limit]}... [truncated]"
    return text


def _check_handler(name: str, schema: Schema[Any], handler: Callable[..., Any]) -> None:
    if not callable(handler):
        raise ToolSignatureError(f"handler for tool {name} is not callable")
    try:
        signature = inspect.signature(handler)
    except (TypeError, ValueError):
        # builtins without introspectable signatures
        return

    params = list(signature.parameters.values())
    positional = [p for p in params if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)]
    required = [p for p in positional if p.default is p.empty]
    has_varargs = any(p.kind is p.VAR_POSITIONAL for p in params)
    required_kwonly = [p for p in params if p.kind is p.KEYWORD_ONLY and p.default is p.empty]
    if (not positional and not has_varargs) or len(required) > 1 or required_kwonly:
        raise ToolSignatureError(f"handler for tool {name} must accept exactly one positional argument")
    if not positional:
        return

    annotation = _resolved_annotation(handler, positional[0].name)
    expected = schema.output_type
    if annotation is None or annotation is Any or annotation is object:
        return
    if isinstance(annotation, type) and isinstance(expected, type) and not issubclass(expected, annotation):
        raise ToolSignatureError(
            f"handler for tool {name} expects {annotation.__name__} but schema decodes {expected.__name__}"
        )


def _resolved_annotation(handler: Callable[..., Any], param_name: str) -> Any:
    try:
        hints = typing.get_type_hints(handler)
    except (NameError, TypeError, AttributeError):
        # forward references that cannot be resolved skip the check
        return None
    return hints.get(param_name)


__all__ = [
    "DuplicateToolError",
    "Handler",
    "InvalidArgumentsError",
    "RegisteredTool",
    "ToolHandlerError",
    "ToolInvocationError",
    "ToolRegistration",
    "ToolRegistry",
    "ToolSignatureError",
    "UnknownToolError",
]
