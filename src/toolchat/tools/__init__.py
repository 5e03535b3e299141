"""Tool registry and aggregation.

Each tool module exports ``tool_registrations`` which returns one or more
``ToolRegistration`` instances. ``get_tool_registrations`` aggregates them and
``build_registry`` loads them into a ``ToolRegistry``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from toolchat.tools.delivery import tool_registrations as delivery_registrations
from toolchat.tools.registry import ToolRegistration, ToolRegistry
from toolchat.tools.shipping import tool_registrations as shipping_registrations
from toolchat.tools.weather import tool_registrations as weather_registrations


def get_tool_registrations() -> list[ToolRegistration[Any]]:
    registrations: list[ToolRegistration[Any]] = []

    def extend(items: Iterable[ToolRegistration[Any]]) -> None:
        registrations.extend(items)

    extend(weather_registrations())
    extend(delivery_registrations())
    extend(shipping_registrations())

    return registrations


def build_registry(logger: logging.Logger | None = None) -> ToolRegistry:
    return ToolRegistry(get_tool_registrations(), logger=logger)


__all__ = ["ToolRegistration", "ToolRegistry", "build_registry", "get_tool_registrations"]
