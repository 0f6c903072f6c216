"""Agent orchestrator: one stateless run per user utterance.

RECEIVED -> (RETRIEVING) -> GENERATING -> (ACTING -> GENERATING)* -> COMPLETE

Conversation state lives in the ``ContextWindow`` passed in, keyed by
conversation id; the orchestrator itself holds nothing per conversation.
"""

from __future__ import annotations

import asyncio
import logging

from shopping_assistant.agent.prompt import FALLBACK_REPLY, SYSTEM_PROMPT, placeholder_reply
from shopping_assistant.agent.types import ActionRecord, AgentReply, TurnOutcome, TurnState
from shopping_assistant.core.errors import ProviderError
from shopping_assistant.knowledge.context import augment_prompt, format_context
from shopping_assistant.knowledge.index import KnowledgeIndex
from shopping_assistant.memory.models import ConversationTurn, Role
from shopping_assistant.memory.window import ContextWindow
from shopping_assistant.providers.base import ActionStep, CompletionProvider, Exchange
from shopping_assistant.tools.registry import ActionCatalog

logger = logging.getLogger("shopping.agent")


class AgentOrchestrator:
    """Compose retrieval, the completion provider and the action catalog for one turn.

    The external contract never raises for provider or retrieval failures:
    provider errors and timeouts become ``FALLBACK_REPLY``, retrieval errors
    fall back to the raw user text, and a missing provider yields a
    deterministic placeholder.
    """

    def __init__(
        self,
        provider: CompletionProvider | None,
        catalog: ActionCatalog,
        window: ContextWindow,
        knowledge: KnowledgeIndex | None = None,
        *,
        system_prompt: str = SYSTEM_PROMPT,
        timeout: float = 30.0,
        max_action_rounds: int = 5,
    ) -> None:
        self.provider = provider
        self.catalog = catalog
        self.window = window
        self.knowledge = knowledge
        self.system_prompt = system_prompt
        self.timeout = timeout
        self.max_action_rounds = max(1, max_action_rounds)

    async def respond(self, conversation_id: str, text: str) -> AgentReply:
        user_turn = ConversationTurn(conversation_id=conversation_id, role=Role.USER, content=text)
        states = [TurnState.RECEIVED]
        logger.info("Processing message for conversation: %s", conversation_id)

        if self.provider is None:
            logger.warning("Completion provider not configured - returning placeholder response")
            states.append(TurnState.COMPLETE)
            return self._reply(user_turn, placeholder_reply(text), TurnOutcome.PLACEHOLDER, states)

        context = ""
        if self.knowledge is not None:
            states.append(TurnState.RETRIEVING)
            context = await self._retrieve_context(text)
        prompt = augment_prompt(context, text)

        exchange = Exchange(
            system_prompt=self.system_prompt,
            history=self.window.read(conversation_id),
            prompt=prompt,
        )
        records: list[ActionRecord] = []

        try:
            answer = await self._run_until_answer(exchange, states, records)
        except Exception:  # noqa: BLE001
            logger.exception("Completion failed for conversation %s", conversation_id)
            states.append(TurnState.FAILED)
            reply = self._reply(user_turn, FALLBACK_REPLY, TurnOutcome.FALLBACK, states, records)
            reply.context_used = bool(context)
            return reply

        states.append(TurnState.COMPLETE)
        reply = self._reply(user_turn, answer, TurnOutcome.COMPLETE, states, records)
        reply.context_used = bool(context)
        self.window.extend(conversation_id, [reply.user_turn, reply.assistant_turn])
        return reply

    async def _retrieve_context(self, text: str) -> str:
        try:
            result = await asyncio.to_thread(self.knowledge.query, text)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Knowledge retrieval failed, continuing without context: %s", exc)
            return ""
        if not result.matches:
            logger.debug("No relevant context found for: '%s'", text)
        return format_context(result)

    async def _run_until_answer(
        self,
        exchange: Exchange,
        states: list[TurnState],
        records: list[ActionRecord],
    ) -> str:
        actions = self.catalog.definitions()

        for round_number in range(self.max_action_rounds + 1):
            states.append(TurnState.GENERATING)
            try:
                completion = await asyncio.wait_for(
                    self.provider.generate(exchange, actions),
                    timeout=self.timeout,
                )
            except asyncio.TimeoutError as exc:
                raise ProviderError(f"Completion timed out after {self.timeout}s") from exc

            if not completion.wants_actions:
                if not completion.text or not completion.text.strip():
                    raise ProviderError("Completion provider returned an empty answer")
                return completion.text.strip()

            if round_number == self.max_action_rounds:
                raise ProviderError(f"Gave up after {self.max_action_rounds} action rounds")

            states.append(TurnState.ACTING)
            results = []
            for invocation in completion.invocations:
                result = await self.catalog.invoke(invocation)
                records.append(ActionRecord(invocation=invocation, result=result))
                results.append(result)
            exchange.steps.append(
                ActionStep(invocations=list(completion.invocations), results=results, text=completion.text)
            )

        raise ProviderError("Completion loop ended without an answer")

    @staticmethod
    def _reply(
        user_turn: ConversationTurn,
        text: str,
        outcome: TurnOutcome,
        states: list[TurnState],
        records: list[ActionRecord] | None = None,
    ) -> AgentReply:
        assistant_turn = ConversationTurn(
            conversation_id=user_turn.conversation_id,
            role=Role.ASSISTANT,
            content=text,
        )
        return AgentReply(
            conversation_id=user_turn.conversation_id,
            text=text,
            outcome=outcome,
            user_turn=user_turn,
            assistant_turn=assistant_turn,
            states=states,
            actions=records or [],
        )
