"""API routes for individual tool access."""

from __future__ import annotations

from fastapi import APIRouter, Body
from pydantic import ValidationError as SchemaError

from shopping_assistant.core.errors import NotFoundError, ValidationError
from shopping_assistant.tools.base import ActionInvocation
from shopping_assistant.tools.registry import ActionCatalog


def create_tools_router(catalog: ActionCatalog) -> APIRouter:
    router = APIRouter(prefix="/tools", tags=["tools"])

    @router.get("")
    async def list_tools() -> list[dict]:
        """Describe every action the assistant can take."""

        return catalog.describe()

    @router.post("/{name}")
    async def invoke_tool(name: str, arguments: dict | None = Body(default=None)) -> dict:
        if name not in catalog:
            raise NotFoundError(f"Unknown tool: {name}")

        try:
            catalog.validate(name, arguments)
        except SchemaError as exc:
            raise ValidationError(
                f"Invalid arguments for {name}",
                details=[
                    {"field": ".".join(str(part) for part in error["loc"]), "message": error["msg"]}
                    for error in exc.errors()
                ],
            ) from exc

        result = await catalog.invoke(ActionInvocation(name=name, arguments=arguments or {}))
        return {"message": result.content, "success": result.success, "data": result.data}

    return router
