"""Parse Chat Completions response bodies into ModelChoice objects."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from toolchat.openai_client.types import (
    ModelChoice,
    TextChoice,
    ToolCall,
    ToolCallsChoice,
    UnexpectedMessageError,
)


def parse_completion(data: Mapping[str, Any]) -> ModelChoice:
    """Return the first choice of a completion as text or tool calls.

    Additional choices are ignored.
    """

    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        raise UnexpectedMessageError("completion contains no choices")

    first = choices[0]
    message = first.get("message") if isinstance(first, Mapping) else None
    if not isinstance(message, Mapping):
        raise UnexpectedMessageError("first choice has no message")

    role = message.get("role")
    if role != "assistant":
        raise UnexpectedMessageError(f"expected assistant message, got role {role!r}")

    content = message.get("content")
    if content is not None and not isinstance(content, str):
        raise UnexpectedMessageError("assistant content must be a string")

    raw_calls = message.get("tool_calls") or []
    if not isinstance(raw_calls, list):
        raise UnexpectedMessageError("tool_calls must be a list")

    if not raw_calls:
        return TextChoice(text=content or "")

    tool_calls = tuple(_parse_tool_call(raw) for raw in raw_calls)
    try:
        return ToolCallsChoice(tool_calls=tool_calls, text=content or None)
    except ValueError as exc:
        raise UnexpectedMessageError(str(exc)) from exc


def _parse_tool_call(raw: Any) -> ToolCall:
    if not isinstance(raw, Mapping):
        raise UnexpectedMessageError("tool call entry must be an object")

    call_type = raw.get("type", "function")
    if call_type != "function":
        raise UnexpectedMessageError(f"unsupported tool call type: {call_type!r}")

    function = raw.get("function")
    if not isinstance(function, Mapping):
        raise UnexpectedMessageError("tool call is missing its function")

    call_id = raw.get("id")
    name = function.get("name")
    arguments = function.get("arguments", "")
    if not isinstance(call_id, str) or not isinstance(name, str) or not isinstance(arguments, str):
        raise UnexpectedMessageError("tool call id, name and arguments must be strings")

    try:
        return ToolCall(id=call_id, name=name, arguments=arguments)
    except ValueError as exc:
        raise UnexpectedMessageError(str(exc)) from exc


__all__ = ["parse_completion"]
