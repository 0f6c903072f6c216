"""Base classes and types for executable tools."""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, ClassVar

from pydantic import BaseModel


@dataclass(slots=True)
class ActionInvocation:
    """A request from the completion provider to run one tool."""

    name: str
    arguments: dict[str, Any] = field(default_factory=dict)
    call_id: str = field(default_factory=lambda: f"call_{uuid.uuid4().hex[:12]}")


@dataclass(slots=True)
class ToolResponse:
    """Standard tool response payload."""

    content: str
    data: dict[str, Any] = field(default_factory=dict)
    success: bool = True


class Tool(ABC):
    """Executable tool implementation interface.

    ``parameters`` is the pydantic model that validates the arguments; its
    JSON schema is what the completion provider sees.
    """

    name: ClassVar[str]
    description: ClassVar[str]
    parameters: ClassVar[type[BaseModel]]

    @abstractmethod
    async def run(self, arguments: BaseModel) -> ToolResponse:
        """Execute the tool with already validated arguments."""

    def parameters_schema(self) -> dict[str, Any]:
        schema = self.parameters.model_json_schema()
        schema.pop("title", None)
        for prop in schema.get("properties", {}).values():
            prop.pop("title", None)
        return schema

    def describe(self) -> dict[str, Any]:
        """Return the name, description and parameter schema of the tool."""

        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters_schema(),
        }
