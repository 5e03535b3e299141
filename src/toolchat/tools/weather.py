"""Weather lookup tool (mocked)."""

from __future__ import annotations

import logging

from pydantic import Field

from toolchat.schema.base import ModelSchema
from toolchat.tools.base import ToolRequest
from toolchat.tools.registry import ToolRegistration

logger = logging.getLogger(__name__)


class WeatherQuery(ToolRequest):
    location: str = Field(description="The city")


async def get_weather(query: WeatherQuery) -> str:
    logger.info("mocking weather lookup for %s", query.location)
    return f"Here's the weather in {query.location}: 32°C"


def tool_registrations() -> list[ToolRegistration[WeatherQuery]]:
    return [ToolRegistration(name="get_weather", schema=ModelSchema(WeatherQuery), handler=get_weather)]


__all__ = ["WeatherQuery", "get_weather", "tool_registrations"]
