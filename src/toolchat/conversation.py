"""Conversation loop that alternates model requests and tool execution.

Each ``run`` starts a fresh transcript seeded with the user's message, sends
it with the registry's tool definitions, answers every tool call the model
emits (in emission order) and asks again, until the model replies with text
or the iteration budget runs out.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from toolchat.config import DEFAULT_MAX_ITERATIONS, Settings
from toolchat.openai_client.client import OpenAIChatClient
from toolchat.openai_client.transport import ChatTransport, create_transport
from toolchat.openai_client.types import (
    AssistantMessage,
    ConversationRequest,
    Message,
    TextChoice,
    ToolCall,
    ToolMessage,
    UserMessage,
)
from toolchat.tools.registry import InvalidArgumentsError, ToolHandlerError, ToolRegistry


class LoopState(str, Enum):
    AWAITING_MODEL = "awaiting_model"
    PROCESSING_TOOL_CALLS = "processing_tool_calls"
    DONE = "done"
    EXHAUSTED = "exhausted"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class ConversationResult:
    text: str
    transcript: tuple[Message, ...]
    requests: int


class NoResultError(Exception):
    """Raised when the iteration budget runs out before a final answer."""

    def __init__(self, requests: int, transcript: tuple[Message, ...]) -> None:
        super().__init__(f"no final answer after {requests} requests")
        self.requests = requests
        self.transcript = transcript


class ConversationLoop:
    """Drive model requests and tool calls for one question at a time."""

    def __init__(
        self,
        client: OpenAIChatClient,
        registry: ToolRegistry,
        *,
        model: str | None = None,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        timeout: float | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        if max_iterations < 0:
            raise ValueError("max_iterations cannot be negative")
        self.client = client
        self.registry = registry
        self.model = model
        self.max_iterations = max_iterations
        self.timeout = timeout
        self.logger = logger
        self.state = LoopState.AWAITING_MODEL

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        registry: ToolRegistry,
        *,
        transport: ChatTransport | None = None,
        logger: logging.Logger | None = None,
    ) -> ConversationLoop:
        transport_instance = transport or create_transport(settings, logger=_transport_logger(logger))
        client = OpenAIChatClient(transport_instance, default_model=settings.model)
        return cls(
            client,
            registry,
            model=settings.model,
            max_iterations=settings.max_iterations,
            timeout=settings.timeout,
            logger=logger,
        )

    async def query(self, user_text: str) -> str:
        """Return the model's final answer to ``user_text``."""

        result = await self.run(user_text)
        return result.text

    async def run(self, user_text: str) -> ConversationResult:
        transcript: list[Message] = [UserMessage(content=user_text)]
        self._transition(LoopState.AWAITING_MODEL)
        try:
            return await self._run(transcript)
        except NoResultError:
            raise
        except BaseException:
            # includes cancellation, which is re-raised unchanged
            self._transition(LoopState.FAILED)
            raise

    async def _run(self, transcript: list[Message]) -> ConversationResult:
        definitions = self.registry.definitions()
        requests = 0
        remaining = self.max_iterations

        while remaining >= 0:
            remaining -= 1
            request = ConversationRequest(
                messages=tuple(transcript),
                model=self.model,
                tools=definitions,
                timeout=self.timeout,
            )
            requests += 1
            self._log("model request %d with %d messages", requests, len(transcript))
            choice = await self.client.send(request)

            if isinstance(choice, TextChoice):
                self._transition(LoopState.DONE)
                return ConversationResult(text=choice.text, transcript=tuple(transcript), requests=requests)

            # The assistant turn is echoed verbatim so every call id below has a matching call.
            transcript.append(AssistantMessage(content=choice.text, tool_calls=choice.tool_calls))
            self._transition(LoopState.PROCESSING_TOOL_CALLS)
            for call in choice.tool_calls:
                content = await self._answer(call)
                transcript.append(ToolMessage(tool_call_id=call.id, content=content))
            self._transition(LoopState.AWAITING_MODEL)

        self._transition(LoopState.EXHAUSTED)
        raise NoResultError(requests, tuple(transcript))

    async def _answer(self, call: ToolCall) -> str:
        """Run one tool call; argument and handler failures become result text."""

        try:
            return await self.registry.invoke(call.name, call.arguments)
        except InvalidArgumentsError as exc:
            self._log("tool %s rejected arguments: %s", call.name, exc)
            return json.dumps(
                {
                    "error": "invalid arguments",
                    "tool": call.name,
                    "issues": [{"path": issue.path, "message": issue.message} for issue in exc.issues],
                }
            )
        except ToolHandlerError as exc:
            self._log("tool %s failed: %s", call.name, exc.cause)
            return json.dumps({"error": "tool failed", "tool": call.name, "detail": str(exc.cause)})

    def _transition(self, state: LoopState) -> None:
        if state is not self.state:
            self._log("state %s -> %s", self.state.value, state.value)
        self.state = state

    def _log(self, message: str, *args: object) -> None:
        if not self.logger:
            return
        self.logger.info(message, *args)


def _transport_logger(logger: logging.Logger | None) -> Callable[[str, dict[str, object]], None] | None:
    if logger is None:
        return None

    def _log_transport_event(name: str, payload: dict[str, object]) -> None:
        logger.debug("transport %s %s", name, payload)

    return _log_transport_event


__all__ = ["ConversationLoop", "ConversationResult", "LoopState", "NoResultError"]
