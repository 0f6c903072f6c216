"""Shopping list storage."""

from .models import ShoppingItem
from .store import InMemoryItemStore, ItemStore, SQLiteItemStore

__all__ = ["ShoppingItem", "ItemStore", "InMemoryItemStore", "SQLiteItemStore"]
