"""Application settings and configuration helpers."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import AnyHttpUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strongly-typed configuration sourced from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    app_name: str = Field(default="Shopping Assistant", description="Human-readable service name.")
    environment: str = Field(default="local", description="Deployment environment identifier.")
    log_level: str = Field(default="INFO", description="Application log level.")

    persistence_enabled: bool = Field(
        default=True,
        description="Persist conversations and shopping items in SQLite; in-memory stores otherwise.",
    )
    sqlite_path: Path = Field(
        default=Path("data/conversations.db"),
        description="Conversation transcript DB path.",
    )
    items_db_path: Path = Field(
        default=Path("data/items.db"),
        description="Shopping list DB path.",
    )

    knowledge_enabled: bool = Field(default=True, description="Enable retrieval-augmented prompts.")
    knowledge_source_path: Path | None = Field(
        default=Path("data/knowledge.csv"),
        description="CSV file ingested into the knowledge index at startup.",
    )
    retrieval_top_k: int = Field(default=5, ge=1, description="Maximum documents returned per query.")
    similarity_threshold: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Minimum similarity score for a retrieved document.",
    )
    ingest_batch_size: int = Field(default=100, ge=1, description="Documents indexed per batch.")

    context_window_size: int = Field(
        default=10,
        ge=1,
        description="Number of recent turns supplied to the completion provider.",
    )

    openrouter_api_key: str | None = Field(
        default=None,
        description="OpenRouter API key. Without it the assistant answers with a placeholder.",
    )
    openrouter_model: str = Field(
        default="openai/gpt-4o-mini",
        description="OpenRouter model identifier (must support tool calling).",
    )
    openrouter_base_url: str = Field(
        default="https://openrouter.ai/api/v1",
        description="OpenAI-compatible API base URL.",
    )
    openrouter_referer: str | None = Field(
        default=None,
        description="Referer header required by OpenRouter (your app URL).",
    )
    openrouter_title: str | None = Field(
        default="Shopping Assistant",
        description="Title header sent to OpenRouter.",
    )
    completion_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout applied to every completion provider call.",
    )
    completion_max_tokens: int = Field(default=1024, ge=1, description="Completion token cap.")
    max_action_rounds: int = Field(
        default=5,
        ge=1,
        description="Maximum tool-calling rounds per turn before giving up.",
    )

    frontend_origin: AnyHttpUrl | None = Field(
        default=None,
        description="Allowed frontend origin (CORS). If omitted, defaults to localhost dev server.",
    )
    additional_origins: List[AnyHttpUrl] = Field(
        default_factory=list,
        description="Additional allowed CORS origins for multi-client deployments.",
    )

    @property
    def cors_origins(self) -> list[str]:
        """Return the full list of allowed CORS origins."""

        origins: list[str] = []

        if self.frontend_origin:
            origins.append(str(self.frontend_origin).rstrip("/"))
        else:
            origins.extend([
                "http://localhost:5173",
                "http://127.0.0.1:5173",
            ])

        for origin in self.additional_origins:
            origins.append(str(origin).rstrip("/"))

        seen: set[str] = set()
        unique: list[str] = []
        for origin in origins:
            if origin not in seen:
                seen.add(origin)
                unique.append(origin)

        return unique

    @property
    def provider_enabled(self) -> bool:
        return bool(self.openrouter_api_key)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()
