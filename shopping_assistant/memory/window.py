"""Bounded per-conversation context window."""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Callable, Iterable, Sequence

from .models import ConversationTurn

logger = logging.getLogger("shopping.memory")

TurnLoader = Callable[[str, int], Sequence[ConversationTurn]]


class ContextWindow:
    """Keeps at most ``max_turns`` recent turns per conversation key.

    Oldest turns are evicted first. Keys never share state. An unknown key
    reads as an empty window. When ``loader`` is given, a key seen for the
    first time is seeded from it (e.g. the tail of a persisted transcript).
    """

    def __init__(self, max_turns: int = 10, loader: TurnLoader | None = None) -> None:
        if max_turns < 1:
            raise ValueError("max_turns must be at least 1")
        self.max_turns = max_turns
        self._loader = loader
        self._lock = threading.Lock()
        self._windows: dict[str, deque[ConversationTurn]] = {}

    def _window(self, conversation_id: str) -> deque[ConversationTurn]:
        window = self._windows.get(conversation_id)
        if window is None:
            seed: Iterable[ConversationTurn] = ()
            if self._loader is not None:
                seed = self._loader(conversation_id, self.max_turns)
                logger.debug("Seeded context window for %s from transcript", conversation_id)
            window = deque(seed, maxlen=self.max_turns)
            self._windows[conversation_id] = window
        return window

    def append(self, conversation_id: str, turn: ConversationTurn) -> None:
        with self._lock:
            self._window(conversation_id).append(turn)

    def extend(self, conversation_id: str, turns: Iterable[ConversationTurn]) -> None:
        """Append several turns as one step, so readers never see half of them."""

        with self._lock:
            self._window(conversation_id).extend(turns)

    def read(self, conversation_id: str) -> list[ConversationTurn]:
        with self._lock:
            if conversation_id not in self._windows and self._loader is None:
                return []
            return list(self._window(conversation_id))

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)
