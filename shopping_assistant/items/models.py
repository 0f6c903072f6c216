"""Shopping list item dataclass."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(slots=True)
class ShoppingItem:
    """One live row on the shopping list. ``name`` is unique ignoring case."""

    id: str
    name: str
    quantity: int
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "quantity": self.quantity,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }


def normalize_name(name: str) -> str:
    """Trimmed display form of an item name."""

    return (name or "").strip()


def name_key(name: str) -> str:
    """Case-insensitive uniqueness key for an item name."""

    return normalize_name(name).casefold()
