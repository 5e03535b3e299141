import json
import pathlib
import sys
from typing import Any

import pytest

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"

# Ensure src/ is importable when running tests without installing the package.
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from toolchat.openai_client.transport import MockChatTransport  # noqa: E402
from toolchat.schema.base import ModelSchema  # noqa: E402
from toolchat.tools.registry import ToolRegistry  # noqa: E402
from toolchat.tools.weather import WeatherQuery  # noqa: E402

PARIS_WEATHER = "Here's the weather in Paris: 32°C"


@pytest.fixture(autouse=True)
def _isolate_toolchat_home(monkeypatch: pytest.MonkeyPatch, tmp_path: pathlib.Path):
    """Point TOOLCHAT_HOME at a temporary sandbox so we never touch the real home."""

    home = tmp_path / "toolchat-home"
    home.mkdir(parents=True, exist_ok=True)
    monkeypatch.setenv("TOOLCHAT_HOME", str(home))
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("OPENAI_BASE_URL", raising=False)
    monkeypatch.delenv("TOOLCHAT_MODEL", raising=False)
    monkeypatch.delenv("TOOLCHAT_MAX_ITERATIONS", raising=False)
    yield home


# ============================================================================
# Completion payload factories
# ============================================================================


def _completion(message: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "model": "gpt-4o",
        "choices": [{"index": 0, "finish_reason": "stop", "message": message}],
    }


@pytest.fixture
def text_completion():
    """Factory for a completion whose first choice is plain assistant text."""

    def _factory(text: str | None) -> dict[str, Any]:
        return _completion({"role": "assistant", "content": text})

    return _factory


@pytest.fixture
def tool_call_completion():
    """Factory for a completion requesting tool calls given (id, name, arguments) tuples."""

    def _factory(*calls: tuple[str, str, str | dict[str, Any]], content: str | None = None) -> dict[str, Any]:
        tool_calls = []
        for call_id, name, arguments in calls:
            raw = arguments if isinstance(arguments, str) else json.dumps(arguments)
            tool_calls.append({"id": call_id, "type": "function", "function": {"name": name, "arguments": raw}})
        return _completion({"role": "assistant", "content": content, "tool_calls": tool_calls})

    return _factory


@pytest.fixture
def mock_chat_transport():
    """Factory fixture for MockChatTransport replaying queued completions."""

    return MockChatTransport


# ============================================================================
# Registries and fakes
# ============================================================================


@pytest.fixture
def weather_registry() -> ToolRegistry:
    """Registry holding only a get_weather tool answering for Paris."""

    async def weather(query: WeatherQuery) -> str:
        return PARIS_WEATHER

    registry = ToolRegistry()
    registry.register("get_weather", ModelSchema(WeatherQuery), weather)
    return registry


class FakeLogger:
    """Lightweight in-memory fake logger that records calls."""

    def __init__(self, name: str = "fake") -> None:
        self.name = name
        self.info_calls: list[tuple[tuple[Any, ...], dict[str, Any]]] = []
        self.debug_calls: list[tuple[tuple[Any, ...], dict[str, Any]]] = []
        self.warning_calls: list[tuple[tuple[Any, ...], dict[str, Any]]] = []
        self.error_calls: list[tuple[tuple[Any, ...], dict[str, Any]]] = []

    def info(self, *args: Any, **kwargs: Any) -> None:
        self.info_calls.append((args, kwargs))

    def debug(self, *args: Any, **kwargs: Any) -> None:
        self.debug_calls.append((args, kwargs))

    def warning(self, *args: Any, **kwargs: Any) -> None:
        self.warning_calls.append((args, kwargs))

    def error(self, *args: Any, **kwargs: Any) -> None:
        self.error_calls.append((args, kwargs))


@pytest.fixture
def fake_logger() -> type[FakeLogger]:
    """Provide FakeLogger class for use in patches."""
    return FakeLogger
