"""Completion provider capability."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Sequence

from shopping_assistant.memory.models import ConversationTurn
from shopping_assistant.tools.base import ActionInvocation, ToolResponse


@dataclass(slots=True)
class ActionStep:
    """One ACTING round: what the model asked for (and said) and what came back."""

    invocations: list[ActionInvocation]
    results: list[ToolResponse]
    text: str | None = None


@dataclass(slots=True)
class Exchange:
    """Everything a provider needs to produce the next completion of a turn."""

    system_prompt: str
    history: Sequence[ConversationTurn]
    prompt: str
    steps: list[ActionStep] = field(default_factory=list)


@dataclass(slots=True)
class Completion:
    """Either final text or a set of action invocations (``text`` may accompany those)."""

    text: str | None = None
    invocations: list[ActionInvocation] = field(default_factory=list)

    @property
    def wants_actions(self) -> bool:
        return bool(self.invocations)


class CompletionProvider(ABC):
    """Produces the next assistant message or an action request."""

    name: str = "provider"

    @abstractmethod
    async def generate(self, exchange: Exchange, actions: Sequence[dict[str, Any]]) -> Completion:
        """Return the next completion. Raise ``ProviderError`` on failure."""

    async def aclose(self) -> None:
        """Release network resources, if any."""
