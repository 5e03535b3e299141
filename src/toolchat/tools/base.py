"""Abstract base classes for class-based tools."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar, Generic, TypeVar

from pydantic import BaseModel, ConfigDict

from toolchat.schema.base import ModelSchema
from toolchat.tools.registry import ToolRegistration

Req = TypeVar("Req", bound=BaseModel)


class ToolRequest(BaseModel):
    """Base class for tool inputs; unknown fields are rejected."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class Tool(Generic[Req], ABC):
    """Abstract tool with a typed request and a text result."""

    name: ClassVar[str]
    description: ClassVar[str | None] = None
    InputModel: ClassVar[type[Req]]

    @abstractmethod
    async def run(self, request: Req) -> str:
        """Run the tool and return its result text."""

    def registration(self) -> ToolRegistration[Req]:
        return ToolRegistration(
            name=self.name,
            schema=ModelSchema(self.InputModel),
            handler=self.run,
            description=self.description,
        )


__all__ = ["Req", "Tool", "ToolRequest"]
