"""OpenAI Chat Completions client orchestrator."""

from __future__ import annotations

from typing import Any

import httpx

from toolchat.openai_client.parsing import parse_completion
from toolchat.openai_client.transport import ChatTransport
from toolchat.openai_client.types import (
    ApiAuthError,
    ApiClientError,
    ApiError,
    ApiRateLimitError,
    ApiServerError,
    ApiTimeoutError,
    AssistantMessage,
    ConversationRequest,
    Message,
    ModelChoice,
    ToolCall,
    ToolDefinition,
    ToolMessage,
    UserMessage,
)
from toolchat.schema.wire import to_wire


class OpenAIChatClient:
    """Async client that submits a transcript and returns the first model choice."""

    def __init__(
        self,
        transport: ChatTransport,
        *,
        default_model: str | None = None,
        default_timeout: float | None = None,
    ) -> None:
        self._transport = transport
        self._default_model = default_model
        self._default_timeout = default_timeout

    @property
    def transport(self) -> ChatTransport:
        return self._transport

    async def send(self, request: ConversationRequest) -> ModelChoice:
        """Submit a conversation request and parse the first returned choice.

        Transport failures are raised as ``ApiError`` subclasses; a response
        that is neither text nor tool calls raises ``UnexpectedMessageError``.
        """

        payload = self._build_payload(request)
        try:
            data = await self._transport.create_completion(payload)
        except httpx.TimeoutException as exc:
            raise ApiTimeoutError("request timed out") from exc
        except httpx.HTTPStatusError as exc:
            raise _map_status_error(exc) from exc
        except httpx.RequestError as exc:
            raise ApiClientError("request failed") from exc
        except ApiError:
            raise
        except Exception as exc:
            raise ApiError("unexpected error") from exc

        return parse_completion(data)

    def _build_payload(self, request: ConversationRequest) -> dict[str, Any]:
        model = request.model or self._default_model
        if not model:
            raise ApiClientError("model is required")

        payload: dict[str, Any] = {
            "model": model,
            "messages": [_message_to_dict(msg) for msg in request.messages],
        }

        tools = [_tool_to_dict(tool) for tool in request.tools]
        if tools:
            payload["tools"] = tools

        timeout = request.timeout if request.timeout is not None else self._default_timeout
        if timeout is not None:
            payload["timeout"] = timeout

        return payload


def _message_to_dict(message: Message) -> dict[str, Any]:
    if isinstance(message, UserMessage):
        return {"role": message.role.value, "content": message.content}
    if isinstance(message, AssistantMessage):
        data: dict[str, Any] = {"role": message.role.value, "content": message.content}
        if message.tool_calls:
            data["tool_calls"] = [_tool_call_to_dict(call) for call in message.tool_calls]
        return data
    if isinstance(message, ToolMessage):
        return {"role": message.role.value, "tool_call_id": message.tool_call_id, "content": message.content}
    raise TypeError(f"Unsupported message: {message!r}")


def _tool_call_to_dict(call: ToolCall) -> dict[str, Any]:
    return {
        "id": call.id,
        "type": "function",
        "function": {"name": call.name, "arguments": call.arguments},
    }


def _tool_to_dict(tool: ToolDefinition) -> dict[str, Any]:
    if not isinstance(tool, ToolDefinition):
        raise TypeError(f"Unsupported tool specification: {tool!r}")
    function: dict[str, Any] = {"name": tool.name}
    if tool.description:
        function["description"] = tool.description
    function["parameters"] = to_wire(tool.parameters)
    return {"type": "function", "function": function}


def _map_status_error(exc: httpx.HTTPStatusError) -> ApiError:
    status = exc.response.status_code
    body = exc.response.text if exc.response is not None else ""
    suffix = f" body={body}" if body else ""
    retry_after = exc.response.headers.get("retry-after")
    retry_suffix = ""
    if retry_after:
        retry_suffix = f" (retry after {retry_after}s)"
    if status in (401, 403):
        return ApiAuthError(f"auth failed with status {status}{suffix}")
    if status == 429:
        return ApiRateLimitError(f"rate limited{retry_suffix}{suffix}")
    if status >= 500:
        return ApiServerError(f"server error {status}{suffix}")
    return ApiClientError(f"request failed with status {status}{suffix}")


__all__ = ["OpenAIChatClient", "_map_status_error"]
