"""Lightweight in-memory metrics collector."""

from __future__ import annotations

import threading
from collections import Counter
from dataclasses import dataclass
from typing import Dict, Iterable


@dataclass
class MetricSnapshot:
    total_turns: int
    turn_outcomes: Dict[str, int]
    action_calls: Dict[str, int]


class MetricsCollector:
    """Thread-safe counter storage for basic service metrics."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._total_turns = 0
        self._outcomes: Counter[str] = Counter()
        self._actions: Counter[str] = Counter()

    def record_turn(self, outcome: str, actions: Iterable[str] = ()) -> None:
        with self._lock:
            self._total_turns += 1
            self._outcomes[outcome] += 1
            for action in actions:
                self._actions[action] += 1

    def snapshot(self) -> MetricSnapshot:
        with self._lock:
            return MetricSnapshot(
                total_turns=self._total_turns,
                turn_outcomes=dict(self._outcomes),
                action_calls=dict(self._actions),
            )
