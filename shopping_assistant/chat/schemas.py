"""Request models for the chat endpoints."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_MESSAGE_LENGTH = 10000


class SendMessageRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str = Field(
        min_length=1,
        description=f"The user's message, at most {MAX_MESSAGE_LENGTH} characters once trimmed.",
    )
    conversation_key: str | None = Field(
        default=None,
        alias="conversationKey",
        description="Existing conversation to continue; omit to start a new one.",
    )

    @field_validator("text")
    @classmethod
    def _trimmed_text(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("Message cannot be blank")
        if len(stripped) > MAX_MESSAGE_LENGTH:
            raise ValueError(f"Message cannot exceed {MAX_MESSAGE_LENGTH} characters")
        return stripped
