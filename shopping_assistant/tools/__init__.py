"""Tool package exports."""

from .base import ActionInvocation, Tool, ToolResponse
from .registry import ActionCatalog, build_shopping_catalog
from .shopping import (
    AddItemTool,
    ClearListTool,
    ListItemsTool,
    RemoveItemTool,
    UpdateItemQuantityTool,
)

__all__ = [
    "ActionInvocation",
    "Tool",
    "ToolResponse",
    "ActionCatalog",
    "build_shopping_catalog",
    "AddItemTool",
    "ClearListTool",
    "ListItemsTool",
    "RemoveItemTool",
    "UpdateItemQuantityTool",
]
