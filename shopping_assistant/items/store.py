"""Shopping item store abstractions with SQLite and in-memory implementations.

The only non-trivial rule lives in ``add``: names are unique ignoring case and
surrounding whitespace, and adding an existing name increments its quantity
instead of creating a second row. Both implementations perform that
check-then-act atomically.
"""

from __future__ import annotations

import logging
import threading
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Sequence

from shopping_assistant.core.db import ensure_parent, sqlite_connection
from shopping_assistant.core.errors import ValidationError

from .models import ShoppingItem, name_key, normalize_name

logger = logging.getLogger("shopping.items")

MAX_NAME_LENGTH = 255


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _validate_name(name: str) -> str:
    normalized = normalize_name(name)
    if not normalized:
        raise ValidationError("Item name cannot be blank")
    if len(normalized) > MAX_NAME_LENGTH:
        raise ValidationError(f"Item name cannot exceed {MAX_NAME_LENGTH} characters")
    return normalized


def _validate_quantity(quantity: int) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationError("Quantity must be an integer")
    if quantity < 1:
        raise ValidationError("Quantity must be at least 1")
    return quantity


class ItemStore(ABC):
    """Abstract interface for the shopping list."""

    @abstractmethod
    def add(self, name: str, quantity: int = 1) -> ShoppingItem:
        """Create the item or increment the quantity of the existing one."""

    @abstractmethod
    def get(self, item_id: str) -> ShoppingItem | None:
        """Return the item with that identifier, if any."""

    @abstractmethod
    def find_by_name(self, name: str) -> ShoppingItem | None:
        """Case-insensitive lookup by item name."""

    @abstractmethod
    def update(self, item_id: str, quantity: int) -> ShoppingItem | None:
        """Set the quantity absolutely. ``None`` when the id is unknown."""

    @abstractmethod
    def remove(self, item_id: str) -> bool:
        """Delete the item; ``False`` when nothing was there."""

    @abstractmethod
    def list(self) -> Sequence[ShoppingItem]:
        """All items, newest-created first."""

    @abstractmethod
    def clear_all(self) -> int:
        """Delete every item and return how many were removed."""

    def remove_by_name(self, name: str) -> ShoppingItem | None:
        """Remove by case-insensitive name and return the removed item.

        ``None`` means the name matched nothing, which callers must treat as
        not-found rather than as a successful no-op.
        """

        item = self.find_by_name(name)
        if item is None or not self.remove(item.id):
            return None
        return item

    def ping(self) -> bool:
        self.list()
        return True


class InMemoryItemStore(ItemStore):
    """Process-local store guarded by a single lock."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._items: dict[str, ShoppingItem] = {}
        self._ids_by_key: dict[str, str] = {}

    def add(self, name: str, quantity: int = 1) -> ShoppingItem:
        normalized = _validate_name(name)
        _validate_quantity(quantity)
        key = name_key(normalized)

        with self._lock:
            now = _utcnow()
            existing_id = self._ids_by_key.get(key)
            if existing_id is not None:
                item = self._items[existing_id]
                logger.info("Item '%s' already exists, incrementing quantity by %s", item.name, quantity)
                item.quantity += quantity
                item.updated_at = now
                return _copy(item)

            item = ShoppingItem(
                id=str(uuid.uuid4()),
                name=normalized,
                quantity=quantity,
                created_at=now,
                updated_at=now,
            )
            self._items[item.id] = item
            self._ids_by_key[key] = item.id
            logger.info("Added item '%s' (quantity: %s)", normalized, quantity)
            return _copy(item)

    def get(self, item_id: str) -> ShoppingItem | None:
        with self._lock:
            item = self._items.get(item_id)
            return _copy(item) if item else None

    def find_by_name(self, name: str) -> ShoppingItem | None:
        with self._lock:
            item_id = self._ids_by_key.get(name_key(name))
            return _copy(self._items[item_id]) if item_id else None

    def update(self, item_id: str, quantity: int) -> ShoppingItem | None:
        _validate_quantity(quantity)
        with self._lock:
            item = self._items.get(item_id)
            if item is None:
                return None
            item.quantity = quantity
            item.updated_at = _utcnow()
            return _copy(item)

    def remove(self, item_id: str) -> bool:
        with self._lock:
            item = self._items.pop(item_id, None)
            if item is None:
                return False
            self._ids_by_key.pop(name_key(item.name), None)
            return True

    def list(self) -> Sequence[ShoppingItem]:
        with self._lock:
            # dict preserves insertion order, i.e. creation order
            return [_copy(item) for item in reversed(list(self._items.values()))]

    def clear_all(self) -> int:
        with self._lock:
            removed = len(self._items)
            self._items.clear()
            self._ids_by_key.clear()
            return removed


class SQLiteItemStore(ItemStore):
    """SQLite-backed store. ``name_key`` carries the uniqueness constraint."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = ensure_parent(db_path)
        self._ensure_schema()

    def _ensure_schema(self) -> None:
        """Create required tables if they do not exist."""

        with sqlite_connection(self.db_path) as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS shopping_items (
                    seq INTEGER PRIMARY KEY AUTOINCREMENT,
                    id TEXT NOT NULL UNIQUE,
                    name TEXT NOT NULL,
                    name_key TEXT NOT NULL UNIQUE,
                    quantity INTEGER NOT NULL CHECK (quantity >= 1),
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );
                """
            )

    def add(self, name: str, quantity: int = 1) -> ShoppingItem:
        normalized = _validate_name(name)
        _validate_quantity(quantity)
        key = name_key(normalized)
        now = _utcnow().isoformat()

        with sqlite_connection(self.db_path, immediate=True) as conn:
            conn.execute(
                """
                INSERT INTO shopping_items (id, name, name_key, quantity, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(name_key) DO UPDATE SET
                    quantity = quantity + excluded.quantity,
                    updated_at = excluded.updated_at
                """,
                (str(uuid.uuid4()), normalized, key, quantity, now, now),
            )
            row = conn.execute(
                "SELECT * FROM shopping_items WHERE name_key = ?",
                (key,),
            ).fetchone()

        item = _row_to_item(row)
        logger.info("Added item '%s' (quantity now %s)", item.name, item.quantity)
        return item

    def get(self, item_id: str) -> ShoppingItem | None:
        with sqlite_connection(self.db_path) as conn:
            row = conn.execute("SELECT * FROM shopping_items WHERE id = ?", (item_id,)).fetchone()
        return _row_to_item(row) if row else None

    def find_by_name(self, name: str) -> ShoppingItem | None:
        with sqlite_connection(self.db_path) as conn:
            row = conn.execute(
                "SELECT * FROM shopping_items WHERE name_key = ?",
                (name_key(name),),
            ).fetchone()
        return _row_to_item(row) if row else None

    def update(self, item_id: str, quantity: int) -> ShoppingItem | None:
        _validate_quantity(quantity)
        with sqlite_connection(self.db_path, immediate=True) as conn:
            cursor = conn.execute(
                "UPDATE shopping_items SET quantity = ?, updated_at = ? WHERE id = ?",
                (quantity, _utcnow().isoformat(), item_id),
            )
            if cursor.rowcount == 0:
                return None
            row = conn.execute("SELECT * FROM shopping_items WHERE id = ?", (item_id,)).fetchone()
        return _row_to_item(row)

    def remove(self, item_id: str) -> bool:
        with sqlite_connection(self.db_path) as conn:
            removed = conn.execute("DELETE FROM shopping_items WHERE id = ?", (item_id,)).rowcount
        return removed > 0

    def list(self) -> Sequence[ShoppingItem]:
        with sqlite_connection(self.db_path) as conn:
            rows = conn.execute("SELECT * FROM shopping_items ORDER BY seq DESC").fetchall()
        return [_row_to_item(row) for row in rows]

    def clear_all(self) -> int:
        with sqlite_connection(self.db_path) as conn:
            removed = conn.execute("DELETE FROM shopping_items").rowcount
        logger.info("Cleared %s shopping items", removed)
        return removed

    def ping(self) -> bool:
        with sqlite_connection(self.db_path) as conn:
            conn.execute("SELECT 1 FROM shopping_items LIMIT 1")
        return True


def _row_to_item(row) -> ShoppingItem:
    return ShoppingItem(
        id=row["id"],
        name=row["name"],
        quantity=row["quantity"],
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


def _copy(item: ShoppingItem) -> ShoppingItem:
    return ShoppingItem(
        id=item.id,
        name=item.name,
        quantity=item.quantity,
        created_at=item.created_at,
        updated_at=item.updated_at,
    )
