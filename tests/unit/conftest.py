"""Pytest unit test fixtures."""

import pytest

from shopping_assistant.items.store import InMemoryItemStore, SQLiteItemStore
from shopping_assistant.memory.store import InMemoryConversationStore, SQLiteConversationStore


@pytest.fixture()
def memory_store(tmp_path):
    db_path = tmp_path / "conversations.db"
    return SQLiteConversationStore(db_path)


@pytest.fixture(params=["memory", "sqlite"])
def conversation_store(request, tmp_path):
    if request.param == "memory":
        return InMemoryConversationStore()
    return SQLiteConversationStore(tmp_path / "conversations.db")


@pytest.fixture(params=["memory", "sqlite"])
def item_store(request, tmp_path):
    if request.param == "memory":
        return InMemoryItemStore()
    return SQLiteItemStore(tmp_path / "items.db")
