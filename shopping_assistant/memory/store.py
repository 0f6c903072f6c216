"""Conversation transcript stores: SQLite for persistence, in-memory otherwise."""

from __future__ import annotations

import threading
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Sequence

from shopping_assistant.core.db import ensure_parent, sqlite_connection

from .models import ConversationTurn, Role


class ConversationStore(ABC):
    """Abstract interface for reading and writing the full conversation history."""

    @abstractmethod
    def create_conversation(self, conversation_id: str | None = None) -> str:
        """Register a conversation and return its key."""

    @abstractmethod
    def exists(self, conversation_id: str) -> bool:
        """Return whether the conversation has been created."""

    @abstractmethod
    def append_turn(self, turn: ConversationTurn, *, in_context: bool = True) -> None:
        """Persist a single conversational turn.

        Turns stored with ``in_context=False`` (failed exchanges) stay in the
        history but are never returned by ``fetch_recent_turns``.
        """

    @abstractmethod
    def fetch_history(self, conversation_id: str) -> Sequence[ConversationTurn]:
        """Return every turn of the conversation, oldest first."""

    @abstractmethod
    def fetch_recent_turns(self, conversation_id: str, limit: int = 10) -> Sequence[ConversationTurn]:
        """Return the most recent in-context turns for a conversation, oldest first."""

    @abstractmethod
    def iter_conversations(self) -> Iterable[str]:
        """Iterate over known conversation identifiers."""

    def ping(self) -> bool:
        list(self.iter_conversations())
        return True


class InMemoryConversationStore(ConversationStore):
    """Transcript kept for the lifetime of the process."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._turns: dict[str, list[ConversationTurn]] = {}
        self._excluded: set[str] = set()

    def create_conversation(self, conversation_id: str | None = None) -> str:
        key = conversation_id or str(uuid.uuid4())
        with self._lock:
            self._turns.setdefault(key, [])
        return key

    def exists(self, conversation_id: str) -> bool:
        with self._lock:
            return conversation_id in self._turns

    def append_turn(self, turn: ConversationTurn, *, in_context: bool = True) -> None:
        with self._lock:
            self._turns.setdefault(turn.conversation_id, []).append(turn)
            if not in_context:
                self._excluded.add(turn.id)

    def fetch_history(self, conversation_id: str) -> Sequence[ConversationTurn]:
        with self._lock:
            return list(self._turns.get(conversation_id, ()))

    def fetch_recent_turns(self, conversation_id: str, limit: int = 10) -> Sequence[ConversationTurn]:
        if limit <= 0:
            return []
        with self._lock:
            turns = [turn for turn in self._turns.get(conversation_id, ()) if turn.id not in self._excluded]
            return turns[-limit:]

    def iter_conversations(self) -> Iterable[str]:
        with self._lock:
            return sorted(self._turns)


class SQLiteConversationStore(ConversationStore):
    """SQLite-backed transcript store."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = ensure_parent(db_path)
        self._ensure_schema()

    def _ensure_schema(self) -> None:
        """Create required tables if they do not exist."""

        with sqlite_connection(self.db_path) as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS conversations (
                    conversation_id TEXT PRIMARY KEY,
                    created_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS messages (
                    seq INTEGER PRIMARY KEY AUTOINCREMENT,
                    id TEXT NOT NULL UNIQUE,
                    conversation_id TEXT NOT NULL,
                    role TEXT NOT NULL,
                    content TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    in_context INTEGER NOT NULL DEFAULT 1,
                    FOREIGN KEY (conversation_id) REFERENCES conversations (conversation_id)
                        ON DELETE CASCADE
                );

                CREATE INDEX IF NOT EXISTS idx_messages_conversation_seq
                    ON messages (conversation_id, seq DESC);
                """
            )
            columns = {row["name"] for row in conn.execute("PRAGMA table_info(messages)")}
            if "in_context" not in columns:
                # databases created before failed turns were kept out of the window
                conn.execute("ALTER TABLE messages ADD COLUMN in_context INTEGER NOT NULL DEFAULT 1")

    def create_conversation(self, conversation_id: str | None = None) -> str:
        key = conversation_id or str(uuid.uuid4())
        with sqlite_connection(self.db_path) as conn:
            conn.execute(
                "INSERT OR IGNORE INTO conversations(conversation_id, created_at) VALUES (?, ?)",
                (key, datetime.now(timezone.utc).isoformat()),
            )
        return key

    def exists(self, conversation_id: str) -> bool:
        with sqlite_connection(self.db_path) as conn:
            row = conn.execute(
                "SELECT 1 FROM conversations WHERE conversation_id = ?",
                (conversation_id,),
            ).fetchone()
        return row is not None

    def append_turn(self, turn: ConversationTurn, *, in_context: bool = True) -> None:
        with sqlite_connection(self.db_path) as conn:
            conn.execute(
                "INSERT OR IGNORE INTO conversations(conversation_id, created_at) VALUES (?, ?)",
                (turn.conversation_id, turn.created_at.isoformat()),
            )
            conn.execute(
                """
                INSERT INTO messages (id, conversation_id, role, content, created_at, in_context)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    turn.id,
                    turn.conversation_id,
                    turn.role.value,
                    turn.content,
                    turn.created_at.isoformat(),
                    int(in_context),
                ),
            )

    def fetch_history(self, conversation_id: str) -> Sequence[ConversationTurn]:
        with sqlite_connection(self.db_path) as conn:
            rows = conn.execute(
                """
                SELECT id, conversation_id, role, content, created_at
                FROM messages
                WHERE conversation_id = ?
                ORDER BY seq ASC
                """,
                (conversation_id,),
            ).fetchall()
        return [_row_to_turn(row) for row in rows]

    def fetch_recent_turns(self, conversation_id: str, limit: int = 10) -> Sequence[ConversationTurn]:
        if limit <= 0:
            return []
        with sqlite_connection(self.db_path) as conn:
            rows = conn.execute(
                """
                SELECT id, conversation_id, role, content, created_at
                FROM messages
                WHERE conversation_id = ? AND in_context = 1
                ORDER BY seq DESC
                LIMIT ?
                """,
                (conversation_id, limit),
            ).fetchall()

        turns = [_row_to_turn(row) for row in rows]
        turns.reverse()
        return turns

    def iter_conversations(self) -> Iterable[str]:
        with sqlite_connection(self.db_path) as conn:
            rows = conn.execute("SELECT conversation_id FROM conversations ORDER BY conversation_id")
            return [row["conversation_id"] for row in rows]


def _row_to_turn(row) -> ConversationTurn:
    return ConversationTurn(
        id=row["id"],
        conversation_id=row["conversation_id"],
        role=Role(row["role"]),
        content=row["content"],
        created_at=datetime.fromisoformat(row["created_at"]),
    )
