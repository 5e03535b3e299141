"""Delivery date lookup tool (mocked)."""

from __future__ import annotations

import logging

from pydantic import Field

from toolchat.tools.base import Tool, ToolRequest
from toolchat.tools.registry import ToolRegistration

logger = logging.getLogger(__name__)


class DeliveryLookupData(ToolRequest):
    order_id: str = Field(alias="orderID", description="The customer's order ID.")


class DeliveryDateTool(Tool[DeliveryLookupData]):
    name = "get_delivery_date"
    description = (
        "Get the delivery date for a customer's order. Call this whenever you need to know the delivery date, "
        "for example when a customer asks 'Where is my package'"
    )
    InputModel = DeliveryLookupData

    async def run(self, request: DeliveryLookupData) -> str:
        logger.info("mocking delivery date lookup for order %s", request.order_id)
        return "Delivery date: 2021-01-15"


def tool_registrations() -> list[ToolRegistration[DeliveryLookupData]]:
    return [DeliveryDateTool().registration()]


__all__ = ["DeliveryDateTool", "DeliveryLookupData", "tool_registrations"]
