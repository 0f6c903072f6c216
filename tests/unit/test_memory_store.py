import sqlite3

from shopping_assistant.memory.models import ConversationTurn, Role
from shopping_assistant.memory.store import SQLiteConversationStore


def test_append_and_fetch(memory_store):
    turn = ConversationTurn(conversation_id="conv-1", role=Role.USER, content="Hello")
    memory_store.append_turn(turn)

    turns = memory_store.fetch_recent_turns("conv-1", limit=5)

    assert len(turns) == 1
    assert turns[0].content == "Hello"
    assert turns[0].role is Role.USER
    assert turns[0].id == turn.id


def test_create_conversation(conversation_store):
    key = conversation_store.create_conversation()

    assert key
    assert conversation_store.exists(key)
    assert not conversation_store.exists("unknown")
    assert conversation_store.fetch_history(key) == []
    assert conversation_store.create_conversation("conv-fixed") == "conv-fixed"


def test_recent_turns_are_oldest_first_and_limited(conversation_store):
    key = conversation_store.create_conversation()
    for number in range(6):
        conversation_store.append_turn(
            ConversationTurn(conversation_id=key, role=Role.USER, content=f"turn {number}")
        )

    recent = conversation_store.fetch_recent_turns(key, limit=3)

    assert [turn.content for turn in recent] == ["turn 3", "turn 4", "turn 5"]
    assert conversation_store.fetch_recent_turns(key, limit=0) == []
    assert len(conversation_store.fetch_history(key)) == 6


def test_conversations_are_isolated(conversation_store):
    conversation_store.append_turn(ConversationTurn(conversation_id="a", role=Role.USER, content="one"))
    conversation_store.append_turn(ConversationTurn(conversation_id="b", role=Role.ASSISTANT, content="two"))

    assert [turn.content for turn in conversation_store.fetch_history("a")] == ["one"]
    assert [turn.content for turn in conversation_store.fetch_history("b")] == ["two"]
    assert set(conversation_store.iter_conversations()) == {"a", "b"}
    assert conversation_store.ping() is True


def test_sqlite_history_survives_reopen(tmp_path):
    path = tmp_path / "conversations.db"
    store = SQLiteConversationStore(path)
    key = store.create_conversation()
    store.append_turn(ConversationTurn(conversation_id=key, role=Role.USER, content="Add milk"))

    reopened = SQLiteConversationStore(path)

    assert reopened.exists(key)
    assert reopened.fetch_history(key)[0].to_dict()["content"] == "Add milk"


def test_out_of_context_turns_stay_in_history_only(conversation_store):
    key = conversation_store.create_conversation()
    conversation_store.append_turn(ConversationTurn(conversation_id=key, role=Role.USER, content="add milk"))
    conversation_store.append_turn(ConversationTurn(conversation_id=key, role=Role.ASSISTANT, content="Added."))
    conversation_store.append_turn(
        ConversationTurn(conversation_id=key, role=Role.USER, content="hi"), in_context=False
    )
    conversation_store.append_turn(
        ConversationTurn(conversation_id=key, role=Role.ASSISTANT, content="Sorry."), in_context=False
    )

    assert [turn.content for turn in conversation_store.fetch_history(key)] == ["add milk", "Added.", "hi", "Sorry."]
    assert [turn.content for turn in conversation_store.fetch_recent_turns(key, limit=10)] == ["add milk", "Added."]


def test_sqlite_adds_context_flag_to_existing_database(tmp_path):
    path = tmp_path / "conversations.db"
    with sqlite3.connect(path) as conn:
        conn.executescript(
            """
            CREATE TABLE conversations (conversation_id TEXT PRIMARY KEY, created_at TEXT NOT NULL);
            CREATE TABLE messages (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                id TEXT NOT NULL UNIQUE,
                conversation_id TEXT NOT NULL,
                role TEXT NOT NULL,
                content TEXT NOT NULL,
                created_at TEXT NOT NULL
            );
            INSERT INTO conversations VALUES ('old', '2024-01-01T00:00:00+00:00');
            INSERT INTO messages (id, conversation_id, role, content, created_at)
                VALUES ('m1', 'old', 'user', 'hello', '2024-01-01T00:00:00+00:00');
            """
        )
    conn.close()

    store = SQLiteConversationStore(path)

    assert [turn.content for turn in store.fetch_recent_turns("old")] == ["hello"]
