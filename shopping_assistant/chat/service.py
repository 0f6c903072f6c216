"""Chat service: conversation bookkeeping around the agent orchestrator."""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from typing import Any

from shopping_assistant.agent.orchestrator import AgentOrchestrator
from shopping_assistant.agent.types import TurnOutcome
from shopping_assistant.chat.schemas import MAX_MESSAGE_LENGTH
from shopping_assistant.core.errors import NotFoundError, ValidationError
from shopping_assistant.core.metrics import MetricsCollector
from shopping_assistant.memory.store import ConversationStore

logger = logging.getLogger("shopping.chat")


class ChatService:
    """Send messages and read history for keyed conversations.

    Turns for the same conversation key are serialised with one lock per key,
    so they reach the context window and the transcript in arrival order. A
    key's lock is dropped once no turn holds or awaits it.
    """

    def __init__(
        self,
        orchestrator: AgentOrchestrator,
        conversations: ConversationStore,
        metrics: MetricsCollector | None = None,
    ) -> None:
        self.orchestrator = orchestrator
        self.conversations = conversations
        self.metrics = metrics
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: Counter[str] = Counter()

    async def send_message(self, text: str, conversation_key: str | None = None) -> dict[str, Any]:
        text = (text or "").strip()
        if not text:
            raise ValidationError("Message cannot be blank")
        if len(text) > MAX_MESSAGE_LENGTH:
            raise ValidationError(f"Message cannot exceed {MAX_MESSAGE_LENGTH} characters")

        logger.info("Processing message: conversation=%s, messageLength=%s", conversation_key, len(text))
        if conversation_key:
            if not self.conversations.exists(conversation_key):
                raise NotFoundError(f"Conversation not found: {conversation_key}")
        else:
            conversation_key = self.conversations.create_conversation()
            logger.info("Created new conversation %s", conversation_key)

        lock = self._locks.setdefault(conversation_key, asyncio.Lock())
        self._lock_users[conversation_key] += 1
        try:
            async with lock:
                reply = await self.orchestrator.respond(conversation_key, text)
                in_context = reply.outcome is TurnOutcome.COMPLETE
                self.conversations.append_turn(reply.user_turn, in_context=in_context)
                self.conversations.append_turn(reply.assistant_turn, in_context=in_context)
        finally:
            self._lock_users[conversation_key] -= 1
            if not self._lock_users[conversation_key]:
                del self._lock_users[conversation_key]
                del self._locks[conversation_key]

        if self.metrics is not None:
            self.metrics.record_turn(reply.outcome.value, reply.action_names)

        return {
            "conversationKey": conversation_key,
            "userTurn": reply.user_turn.to_dict(),
            "assistantTurn": reply.assistant_turn.to_dict(),
            "outcome": reply.outcome.value,
            "actions": [
                {
                    "name": record.invocation.name,
                    "success": record.result.success,
                    "message": record.result.content,
                }
                for record in reply.actions
            ],
        }

    def get_history(self, conversation_key: str) -> dict[str, Any]:
        logger.debug("Fetching chat history for conversation: %s", conversation_key)
        if not self.conversations.exists(conversation_key):
            raise NotFoundError(f"Conversation not found: {conversation_key}")

        turns = self.conversations.fetch_history(conversation_key)
        return {
            "conversationKey": conversation_key,
            "turns": [turn.to_dict() for turn in turns],
        }

    def list_conversations(self) -> list[str]:
        return list(self.conversations.iter_conversations())
