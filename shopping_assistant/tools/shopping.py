"""Shopping list tools exposed to the completion provider.

Each tool is a thin adapter over the item store and answers with a short
sentence, since the model weaves tool output into its reply as text.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from shopping_assistant.items.store import ItemStore
from shopping_assistant.tools.base import Tool, ToolResponse


class AddItemParams(BaseModel):
    name: str = Field(description="Name of the item to add", min_length=1, max_length=255)
    quantity: int = Field(default=1, ge=1, description="Quantity to add (default 1)")


class NoParams(BaseModel):
    pass


class RemoveItemParams(BaseModel):
    name: str = Field(description="Name of the item to remove", min_length=1)


class UpdateItemQuantityParams(BaseModel):
    name: str = Field(description="Name of the item to update", min_length=1)
    quantity: int = Field(ge=1, description="New quantity")


class _ShoppingTool(Tool):
    def __init__(self, store: ItemStore) -> None:
        self.store = store


class AddItemTool(_ShoppingTool):
    name = "addItem"
    description = (
        "Add an item to the shopping list. If the item already exists, its quantity will be increased."
    )
    parameters = AddItemParams

    async def run(self, arguments: AddItemParams) -> ToolResponse:
        item = self.store.add(arguments.name, arguments.quantity)
        return ToolResponse(
            content=f"Added {item.name} (quantity: {item.quantity}) to your shopping list.",
            data={"item": item.to_dict()},
        )


class ListItemsTool(_ShoppingTool):
    name = "listItems"
    description = "List all items in the shopping list"
    parameters = NoParams

    async def run(self, arguments: NoParams) -> ToolResponse:
        items = self.store.list()
        if not items:
            return ToolResponse(content="Your shopping list is empty.", data={"items": []})
        return ToolResponse(
            content="\n".join(f"- {item.name}: {item.quantity}" for item in items),
            data={"items": [item.to_dict() for item in items]},
        )


class RemoveItemTool(_ShoppingTool):
    name = "removeItem"
    description = "Remove an item from the shopping list by name"
    parameters = RemoveItemParams

    async def run(self, arguments: RemoveItemParams) -> ToolResponse:
        item = self.store.remove_by_name(arguments.name)
        if item is None:
            return ToolResponse(
                content=f"Could not find '{arguments.name}' on your shopping list.",
                data={"name": arguments.name},
                success=False,
            )
        return ToolResponse(
            content=f"Removed {item.name} from your shopping list.",
            data={"item": item.to_dict()},
        )


class UpdateItemQuantityTool(_ShoppingTool):
    name = "updateItemQuantity"
    description = "Update the quantity of an item on the shopping list"
    parameters = UpdateItemQuantityParams

    async def run(self, arguments: UpdateItemQuantityParams) -> ToolResponse:
        item = self.store.find_by_name(arguments.name)
        updated = self.store.update(item.id, arguments.quantity) if item else None
        if updated is None:
            return ToolResponse(
                content=f"Could not find '{arguments.name}' on your shopping list.",
                data={"name": arguments.name},
                success=False,
            )
        return ToolResponse(
            content=f"Updated {updated.name} to quantity: {updated.quantity}",
            data={"item": updated.to_dict()},
        )


class ClearListTool(_ShoppingTool):
    name = "clearList"
    description = "Clear all items from the shopping list"
    parameters = NoParams

    async def run(self, arguments: NoParams) -> ToolResponse:
        removed = self.store.clear_all()
        return ToolResponse(
            content="Cleared all items from your shopping list.",
            data={"removed": removed},
        )


def shopping_tools(store: ItemStore) -> list[Tool]:
    return [
        AddItemTool(store),
        ListItemsTool(store),
        RemoveItemTool(store),
        UpdateItemQuantityTool(store),
        ClearListTool(store),
    ]
