"""OpenAI Chat Completions client package."""

from __future__ import annotations

from .client import OpenAIChatClient  # noqa: F401
from .parsing import parse_completion  # noqa: F401
from .transport import (  # noqa: F401
    ChatTransport,
    HttpChatTransport,
    MockChatTransport,
    OpenAISDKChatTransport,
    create_transport,
)
from .types import (  # noqa: F401
    ApiAuthError,
    ApiClientError,
    ApiError,
    ApiRateLimitError,
    ApiServerError,
    ApiTimeoutError,
    AssistantMessage,
    ConversationRequest,
    Message,
    MessageRole,
    ModelChoice,
    TextChoice,
    ToolCall,
    ToolCallsChoice,
    ToolDefinition,
    ToolMessage,
    UnexpectedMessageError,
    UserMessage,
)
