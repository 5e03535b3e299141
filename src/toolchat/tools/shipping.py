"""Shipping cost estimate tool (mocked)."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Annotated

from pydantic import Field

from toolchat.tools.base import Tool, ToolRequest
from toolchat.tools.registry import ToolRegistration

logger = logging.getLogger(__name__)


class DeliveryType(str, Enum):
    STANDARD = "standard"
    EXPRESS = "express"
    OVERNIGHT = "overnight"


class ShippingEstimateRequest(ToolRequest):
    weight: float = Field(description="The weight of the package in kilograms")
    priority: bool = Field(description="Whether this should be a priority delivery")
    delivery_type: DeliveryType = Field(
        default=DeliveryType.STANDARD, alias="deliveryType", description="The type of delivery requested."
    )
    extras: Annotated[list[str], Field(min_length=1)] | None = Field(
        default=None,
        description="A list of extra features requested by the customer",
    )


class ShippingCostTool(Tool[ShippingEstimateRequest]):
    name = "calculate_shipping_cost"
    description = "Estimate shipping cost for a customer's order."
    InputModel = ShippingEstimateRequest

    async def run(self, request: ShippingEstimateRequest) -> str:
        logger.info("mocking shipping estimate for %s", request.model_dump_json())
        return "Shipping cost: $20"


def tool_registrations() -> list[ToolRegistration[ShippingEstimateRequest]]:
    return [ShippingCostTool().registration()]


__all__ = ["DeliveryType", "ShippingCostTool", "ShippingEstimateRequest", "tool_registrations"]
