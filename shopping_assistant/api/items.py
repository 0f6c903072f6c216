"""CRUD routes for the shopping list."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Response
from pydantic import BaseModel, Field

from shopping_assistant.core.errors import NotFoundError
from shopping_assistant.items.store import MAX_NAME_LENGTH, ItemStore

logger = logging.getLogger("shopping.items")


class AddItemRequest(BaseModel):
    name: str = Field(min_length=1, max_length=MAX_NAME_LENGTH)
    quantity: int = Field(default=1, ge=1)


class UpdateItemRequest(BaseModel):
    quantity: int = Field(ge=1)


def create_items_router(store: ItemStore) -> APIRouter:
    router = APIRouter(prefix="/api/items", tags=["items"])

    @router.get("")
    async def list_items() -> list[dict]:
        logger.debug("GET /api/items - Fetching all items")
        return [item.to_dict() for item in store.list()]

    @router.post("", status_code=201)
    async def add_item(request: AddItemRequest) -> dict:
        """Add an item; an existing name (ignoring case) has its quantity incremented."""

        logger.info("POST /api/items - Adding item: %s", request.name)
        return store.add(request.name, request.quantity).to_dict()

    @router.get("/{item_id}")
    async def get_item(item_id: str) -> dict:
        item = store.get(item_id)
        if item is None:
            raise NotFoundError(f"Item not found: {item_id}")
        return item.to_dict()

    @router.put("/{item_id}")
    async def update_item(item_id: str, request: UpdateItemRequest) -> dict:
        logger.info("PUT /api/items/%s - Updating item", item_id)
        item = store.update(item_id, request.quantity)
        if item is None:
            raise NotFoundError(f"Item not found: {item_id}")
        return item.to_dict()

    @router.delete("/{item_id}", status_code=204)
    async def delete_item(item_id: str) -> Response:
        logger.info("DELETE /api/items/%s - Deleting item", item_id)
        if not store.remove(item_id):
            raise NotFoundError(f"Item not found: {item_id}")
        return Response(status_code=204)

    @router.delete("", status_code=204)
    async def clear_items() -> Response:
        logger.info("DELETE /api/items - Clearing all items")
        store.clear_all()
        return Response(status_code=204)

    return router
