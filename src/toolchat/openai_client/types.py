"""Domain models for the OpenAI Chat Completions client."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, TypeAlias


class MessageRole(str, Enum):
    """Chat message roles used in a transcript."""

    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


@dataclass(frozen=True, slots=True)
class ToolCall:
    """Tool invocation requested by the model."""

    id: str
    name: str
    arguments: str

    def __post_init__(self) -> None:
        if not self.id.strip():
            raise ValueError("tool call id cannot be empty")
        if not self.name.strip():
            raise ValueError("tool call name cannot be empty")
        # arguments are raw model output; validation happens in the tool schema.


@dataclass(frozen=True, slots=True)
class UserMessage:
    role: ClassVar[MessageRole] = MessageRole.USER

    content: str

    def __post_init__(self) -> None:
        if not self.content:
            raise ValueError("content cannot be empty")


@dataclass(frozen=True, slots=True)
class AssistantMessage:
    role: ClassVar[MessageRole] = MessageRole.ASSISTANT

    content: str | None = None
    tool_calls: tuple[ToolCall, ...] = ()

    def __post_init__(self) -> None:
        if not self.content and not self.tool_calls:
            raise ValueError("assistant message needs content or tool calls")
        ids = [call.id for call in self.tool_calls]
        if len(set(ids)) != len(ids):
            raise ValueError("tool call ids must be unique within a message")


@dataclass(frozen=True, slots=True)
class ToolMessage:
    role: ClassVar[MessageRole] = MessageRole.TOOL

    tool_call_id: str
    content: str

    def __post_init__(self) -> None:
        if not self.tool_call_id.strip():
            raise ValueError("tool_call_id cannot be empty")


Message: TypeAlias = UserMessage | AssistantMessage | ToolMessage


@dataclass(frozen=True, slots=True)
class ToolDefinition:
    """Function tool advertised to the Chat Completions API."""

    name: str
    parameters: Mapping[str, Any]
    description: str | None = None

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("tool name cannot be empty")
        if self.description is not None and not self.description.strip():
            raise ValueError("tool description cannot be blank")


@dataclass(frozen=True, slots=True)
class ConversationRequest:
    """Structured request used by the OpenAIChatClient."""

    messages: Sequence[Message]
    model: str | None
    tools: Sequence[ToolDefinition] = field(default_factory=tuple)
    timeout: float | None = None

    def __post_init__(self) -> None:
        if isinstance(self.model, str) and not self.model.strip():
            raise ValueError("model cannot be empty string")
        if not self.messages:
            raise ValueError("messages cannot be empty")
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be positive when provided")


@dataclass(frozen=True, slots=True)
class TextChoice:
    """Final assistant answer without tool calls."""

    text: str


@dataclass(frozen=True, slots=True)
class ToolCallsChoice:
    """Assistant turn requesting one or more tool invocations."""

    tool_calls: tuple[ToolCall, ...]
    text: str | None = None

    def __post_init__(self) -> None:
        if not self.tool_calls:
            raise ValueError("tool calls choice requires at least one call")
        ids = [call.id for call in self.tool_calls]
        if len(set(ids)) != len(ids):
            raise ValueError("tool call ids must be unique within a message")


ModelChoice: TypeAlias = TextChoice | ToolCallsChoice


class ApiError(Exception):
    """Base class for API-related errors."""


class ApiAuthError(ApiError):
    """Authentication/authorization error."""


class ApiRateLimitError(ApiError):
    """Rate limit exceeded."""


class ApiTimeoutError(ApiError):
    """Network timeout."""


class ApiServerError(ApiError):
    """5xx server error."""


class ApiClientError(ApiError):
    """4xx client-side error not covered by other errors."""


class UnexpectedMessageError(Exception):
    """Raised when a completion is neither assistant text nor tool calls."""


__all__ = [
    "ApiAuthError",
    "ApiClientError",
    "ApiError",
    "ApiRateLimitError",
    "ApiServerError",
    "ApiTimeoutError",
    "AssistantMessage",
    "ConversationRequest",
    "Message",
    "MessageRole",
    "ModelChoice",
    "TextChoice",
    "ToolCall",
    "ToolCallsChoice",
    "ToolDefinition",
    "ToolMessage",
    "UnexpectedMessageError",
    "UserMessage",
]
