"""Orchestrator-related enums and data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from shopping_assistant.memory.models import ConversationTurn
from shopping_assistant.tools.base import ActionInvocation, ToolResponse


class TurnState(str, Enum):
    """States a single turn moves through."""

    RECEIVED = "received"
    RETRIEVING = "retrieving"
    GENERATING = "generating"
    ACTING = "acting"
    COMPLETE = "complete"
    FAILED = "failed"


class TurnOutcome(str, Enum):
    """How the turn ended, as reported to callers and metrics."""

    COMPLETE = "complete"
    FALLBACK = "fallback"
    PLACEHOLDER = "placeholder"


@dataclass(slots=True)
class ActionRecord:
    invocation: ActionInvocation
    result: ToolResponse


@dataclass(slots=True)
class AgentReply:
    """Result of one orchestration run. ``text`` is never blank."""

    conversation_id: str
    text: str
    outcome: TurnOutcome
    user_turn: ConversationTurn
    assistant_turn: ConversationTurn
    states: list[TurnState] = field(default_factory=list)
    actions: list[ActionRecord] = field(default_factory=list)
    context_used: bool = False

    @property
    def action_names(self) -> list[str]:
        return [record.invocation.name for record in self.actions]
