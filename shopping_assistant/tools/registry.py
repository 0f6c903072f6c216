"""Action catalog: an explicit name -> tool registry built once at startup."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Iterator, Mapping

from pydantic import ValidationError as SchemaError

from shopping_assistant.items.store import ItemStore
from shopping_assistant.tools.base import ActionInvocation, Tool, ToolResponse
from shopping_assistant.tools.shopping import shopping_tools

logger = logging.getLogger("shopping.tools")


class ActionCatalog:
    """Dispatch invocations to registered tools.

    ``invoke`` never raises: unknown names, bad arguments and tool failures
    all come back as an unsuccessful ``ToolResponse`` the model can read.
    """

    def __init__(self, tools: Iterable[Tool]) -> None:
        self._tools: dict[str, Tool] = {}
        for tool in tools:
            if tool.name in self._tools:
                raise ValueError(f"Duplicate tool name: {tool.name}")
            self._tools[tool.name] = tool

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[Tool]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)

    def get(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def names(self) -> list[str]:
        return list(self._tools)

    def describe(self) -> list[dict[str, Any]]:
        return [tool.describe() for tool in self._tools.values()]

    def definitions(self) -> list[dict[str, Any]]:
        """Function-calling definitions in the OpenAI-compatible shape."""

        return [{"type": "function", "function": tool.describe()} for tool in self._tools.values()]

    def validate(self, name: str, arguments: Mapping[str, Any] | None):
        """Return the validated argument model; raises pydantic's ValidationError."""

        tool = self._tools[name]
        return tool.parameters.model_validate(dict(arguments or {}))

    async def invoke(self, invocation: ActionInvocation) -> ToolResponse:
        tool = self._tools.get(invocation.name)
        if tool is None:
            return ToolResponse(
                content=f"Unknown action '{invocation.name}'.",
                data={"action": invocation.name},
                success=False,
            )

        try:
            arguments = tool.parameters.model_validate(invocation.arguments or {})
        except SchemaError as exc:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in error['loc']) or 'arguments'}: {error['msg']}"
                for error in exc.errors()
            )
            return ToolResponse(
                content=f"Invalid arguments for {tool.name}: {problems}",
                data={"action": tool.name, "errors": problems},
                success=False,
            )

        try:
            response = await tool.run(arguments)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Tool execution failed", extra={"action": tool.name})
            return ToolResponse(
                content=f"I ran into an issue running {tool.name}: {exc}",
                data={"action": tool.name, "error": str(exc)},
                success=False,
            )

        logger.info("Executed action %s (success=%s)", tool.name, response.success)
        return response


def build_shopping_catalog(store: ItemStore) -> ActionCatalog:
    return ActionCatalog(shopping_tools(store))
