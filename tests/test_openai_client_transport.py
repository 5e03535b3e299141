import json
from types import SimpleNamespace
from typing import Any

import httpx
import openai
import pytest

from toolchat.config import Settings, TransportKind
from toolchat.openai_client.transport import (
    DEFAULT_BASE_URL,
    HttpChatTransport,
    MockChatTransport,
    OpenAISDKChatTransport,
    create_transport,
)


@pytest.mark.asyncio
async def test_http_transport_posts_payload_and_sets_headers(text_completion) -> None:
    recorded: dict[str, Any] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        recorded["method"] = request.method
        recorded["url"] = str(request.url)
        recorded["headers"] = request.headers
        recorded["payload"] = json.loads(request.content.decode())
        return httpx.Response(200, json=text_completion("hi"), request=request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    transport = HttpChatTransport(api_key="abc", client=client)

    data = await transport.create_completion({"model": "gpt-4o", "messages": [], "timeout": 5.0})

    await transport.aclose()
    await client.aclose()

    assert recorded["method"] == "POST"
    assert recorded["url"] == "https://api.openai.com/v1/chat/completions"
    assert recorded["payload"] == {"model": "gpt-4o", "messages": []}
    assert recorded["headers"]["authorization"] == "Bearer abc"
    assert recorded["headers"]["content-type"] == "application/json"
    assert recorded["headers"]["user-agent"] == "toolchat/0.1.0"
    assert data["choices"][0]["message"]["content"] == "hi"


@pytest.mark.asyncio
async def test_http_transport_custom_base_url(text_completion) -> None:
    recorded: dict[str, str] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        recorded["url"] = str(request.url)
        return httpx.Response(200, json=text_completion("ok"), request=request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    transport = HttpChatTransport(api_key="abc", base_url="http://localhost:8080/v1/", client=client)

    await transport.create_completion({"model": "m"})
    await client.aclose()

    assert recorded["url"] == "http://localhost:8080/v1/chat/completions"


@pytest.mark.asyncio
async def test_http_transport_raises_on_http_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429, text="rate limited", request=request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    transport = HttpChatTransport(api_key="abc", client=client)

    with pytest.raises(httpx.HTTPStatusError):
        await transport.create_completion({"model": "m"})

    await client.aclose()


@pytest.mark.asyncio
async def test_logging_hook_records_status_and_request_id(text_completion) -> None:
    events: list[tuple[str, dict[str, object]]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=text_completion("hi"), headers={"x-request-id": "req-123"}, request=request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    transport = HttpChatTransport(api_key="abc", client=client, logger=lambda e, d: events.append((e, d)))

    await transport.create_completion({"model": "m"})
    await client.aclose()

    assert events and events[0][0] == "response_complete"
    data = events[0][1]
    assert data["status"] == 200
    assert data["request_id"] == "req-123"
    assert data["base_url"] == DEFAULT_BASE_URL


@pytest.mark.asyncio
async def test_http_transport_async_context_manager_closes_owned_client() -> None:
    async with HttpChatTransport(api_key="k") as transport:
        assert transport.base_url == DEFAULT_BASE_URL

    assert transport._client.is_closed


def test_http_transport_requires_api_key() -> None:
    with pytest.raises(ValueError):
        HttpChatTransport(api_key=" ")


@pytest.mark.asyncio
async def test_mock_transport_replays_and_records(text_completion) -> None:
    transport = MockChatTransport([text_completion("one"), httpx.ConnectError("down")])

    first = await transport.create_completion({"n": 1})
    with pytest.raises(httpx.ConnectError):
        await transport.create_completion({"n": 2})
    with pytest.raises(RuntimeError, match="no more responses"):
        await transport.create_completion({"n": 3})

    assert first["choices"][0]["message"]["content"] == "one"
    assert transport.payloads == [{"n": 1}, {"n": 2}, {"n": 3}]


class _FakeCompletions:
    def __init__(self, result: Any = None, error: Exception | None = None) -> None:
        self.result = result
        self.error = error
        self.kwargs: dict[str, Any] = {}

    async def create(self, **kwargs: Any) -> Any:
        self.kwargs = kwargs
        if self.error is not None:
            raise self.error
        return self.result


def _fake_sdk_client(completions: _FakeCompletions) -> Any:
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


@pytest.mark.asyncio
async def test_sdk_transport_returns_model_dump(mocker, text_completion) -> None:
    completion = mocker.Mock()
    completion.model_dump.return_value = text_completion("hi")
    completions = _FakeCompletions(result=completion)
    transport = OpenAISDKChatTransport(api_key="x", client=_fake_sdk_client(completions))

    data = await transport.create_completion({"model": "gpt-4o", "messages": []})

    assert completions.kwargs == {"model": "gpt-4o", "messages": []}
    assert data["choices"][0]["message"]["content"] == "hi"


@pytest.mark.asyncio
async def test_sdk_transport_maps_status_errors_with_body() -> None:
    request = httpx.Request("POST", "https://api.test/chat/completions")
    response = httpx.Response(400, text="bad", request=request)
    error = openai.APIStatusError("boom", response=response, body=None)
    transport = OpenAISDKChatTransport(api_key="x", client=_fake_sdk_client(_FakeCompletions(error=error)))

    with pytest.raises(httpx.HTTPStatusError) as excinfo:
        await transport.create_completion({"model": "m"})

    assert excinfo.value.response.status_code == 400
    assert "body=bad" in str(excinfo.value)


@pytest.mark.asyncio
async def test_sdk_transport_maps_timeouts_and_connection_errors() -> None:
    request = httpx.Request("POST", "https://api.test/chat/completions")
    timeout = OpenAISDKChatTransport(
        api_key="x", client=_fake_sdk_client(_FakeCompletions(error=openai.APITimeoutError(request=request)))
    )
    connection = OpenAISDKChatTransport(
        api_key="x", client=_fake_sdk_client(_FakeCompletions(error=openai.APIConnectionError(request=request)))
    )

    with pytest.raises(httpx.TimeoutException):
        await timeout.create_completion({"model": "m"})
    with pytest.raises(httpx.RequestError):
        await connection.create_completion({"model": "m"})


@pytest.mark.asyncio
async def test_sdk_transport_does_not_close_injected_client(mocker) -> None:
    client = mocker.Mock()
    client.close = mocker.AsyncMock()
    transport = OpenAISDKChatTransport(api_key="x", client=client)

    await transport.aclose()

    client.close.assert_not_called()


def test_create_transport_selects_kind() -> None:
    sdk = create_transport(Settings(api_key="k"))
    http = create_transport(Settings(api_key="k", transport=TransportKind.HTTP, base_url="http://local/v1"))

    assert isinstance(sdk, OpenAISDKChatTransport)
    assert isinstance(http, HttpChatTransport)
    assert http.base_url == "http://local/v1"


def test_create_transport_requires_api_key() -> None:
    with pytest.raises(ValueError, match="OPENAI_API_KEY"):
        create_transport(Settings())
