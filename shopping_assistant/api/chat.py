"""API routes for chatting with the assistant."""

from __future__ import annotations

from fastapi import APIRouter

from shopping_assistant.chat.schemas import SendMessageRequest
from shopping_assistant.chat.service import ChatService


def create_chat_router(chat_service: ChatService) -> APIRouter:
    router = APIRouter(tags=["chat"])

    @router.post("/chat")
    async def send_message(request: SendMessageRequest) -> dict:
        """Send a message to the agent; omit ``conversationKey`` to start a conversation."""

        return await chat_service.send_message(request.text, request.conversation_key)

    @router.get("/chat/{conversation_key}")
    async def chat_history(conversation_key: str) -> dict:
        return chat_service.get_history(conversation_key)

    @router.get("/conversations", tags=["conversations"])
    async def list_conversations() -> list[str]:
        """List known conversation identifiers (development helper)."""

        return chat_service.list_conversations()

    return router
