"""Transport abstraction for the OpenAI Chat Completions client."""

from __future__ import annotations

import time
from collections.abc import Callable, Mapping, Sequence
from typing import Any, Protocol

import httpx
import openai
from openai import AsyncOpenAI

from toolchat.config import Settings, TransportKind


class ChatTransport(Protocol):
    """Protocol for posting Chat Completions payloads."""

    async def create_completion(self, payload: Mapping[str, Any]) -> Mapping[str, Any]:
        """Return the decoded completion body."""


DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_TIMEOUT = httpx.Timeout(60.0, connect=5.0)


class HttpChatTransport:
    """httpx-based transport for the real Chat Completions API."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: httpx.Timeout | float | None = None,
        client: httpx.AsyncClient | None = None,
        user_agent: str | None = "toolchat/0.1.0",
        logger: Callable[[str, dict[str, object]], None] | None = None,
    ) -> None:
        if not api_key.strip():
            raise ValueError("api_key cannot be empty")

        self.api_key = api_key.strip()
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout or DEFAULT_TIMEOUT
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=self.timeout)
        self._user_agent = user_agent
        self._logger = logger

    async def create_completion(self, payload: Mapping[str, Any]) -> Mapping[str, Any]:
        url = f"{self.base_url}/chat/completions"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        if self._user_agent:
            headers["User-Agent"] = self._user_agent

        body = dict(payload)
        timeout = body.pop("timeout", None) or self.timeout

        start = time.perf_counter()
        response = await self._client.post(url, json=body, headers=headers, timeout=timeout)
        response.raise_for_status()
        data = response.json()
        if self._logger:
            self._logger(
                "response_complete",
                {
                    "status": response.status_code,
                    "request_id": response.headers.get("x-request-id"),
                    "duration_sec": time.perf_counter() - start,
                    "base_url": self.base_url,
                },
            )
        return data

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> HttpChatTransport:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


class MockChatTransport:
    """In-memory transport that replays queued completions for tests/offline mode.

    Queued ``BaseException`` instances are raised instead of returned.
    """

    def __init__(self, responses: Sequence[Mapping[str, Any] | BaseException]) -> None:
        self._responses = list(responses)
        self.payloads: list[Mapping[str, Any]] = []

    async def create_completion(self, payload: Mapping[str, Any]) -> Mapping[str, Any]:
        self.payloads.append(payload)
        if not self._responses:
            raise RuntimeError("no more responses")
        response = self._responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response

    async def aclose(self) -> None:
        return None


class OpenAISDKChatTransport:
    """Transport backed by the official openai Python SDK."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str | None = None,
        organization: str | None = None,
        project: str | None = None,
        client: Any | None = None,
    ) -> None:
        if not api_key.strip():
            raise ValueError("api_key cannot be empty")

        self._owns_client = client is None
        self._client = client or AsyncOpenAI(
            api_key=api_key.strip(),
            base_url=base_url,
            organization=organization,
            project=project,
            max_retries=0,
        )

    async def create_completion(self, payload: Mapping[str, Any]) -> Mapping[str, Any]:
        # SDK errors are re-raised as httpx errors so the client maps both transports alike.
        try:
            completion = await self._client.chat.completions.create(**payload)
        except openai.APIStatusError as exc:
            text = exc.response.text if exc.response is not None else ""
            raise httpx.HTTPStatusError(f"{exc} body={text}", request=exc.request, response=exc.response) from exc
        except openai.APITimeoutError as exc:
            raise httpx.TimeoutException(str(exc), request=exc.request) from exc
        except openai.APIConnectionError as exc:
            raise httpx.RequestError(str(exc), request=exc.request) from exc
        return completion.model_dump()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.close()


def create_transport(
    settings: Settings, *, logger: Callable[[str, dict[str, object]], None] | None = None
) -> HttpChatTransport | OpenAISDKChatTransport:
    """Build the transport selected in settings; requires an API key."""

    if not settings.api_key:
        raise ValueError("OPENAI_API_KEY not set")
    if settings.transport is TransportKind.HTTP:
        return HttpChatTransport(
            settings.api_key,
            base_url=settings.base_url or DEFAULT_BASE_URL,
            timeout=settings.timeout,
            logger=logger,
        )
    return OpenAISDKChatTransport(settings.api_key, base_url=settings.base_url)


__all__ = [
    "ChatTransport",
    "DEFAULT_BASE_URL",
    "HttpChatTransport",
    "MockChatTransport",
    "OpenAISDKChatTransport",
    "create_transport",
]
