"""FastAPI application entry point for the Shopping Assistant backend."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from shopping_assistant.agent.orchestrator import AgentOrchestrator
from shopping_assistant.api.chat import create_chat_router
from shopping_assistant.api.items import create_items_router
from shopping_assistant.api.tools import create_tools_router
from shopping_assistant.chat.service import ChatService
from shopping_assistant.core.config import Settings, get_settings
from shopping_assistant.core.errors import (
    IngestionError,
    NotFoundError,
    ValidationError,
    not_found_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from shopping_assistant.core.logging import configure_logging, request_id_middleware
from shopping_assistant.core.metrics import MetricsCollector
from shopping_assistant.items.store import InMemoryItemStore, ItemStore, SQLiteItemStore
from shopping_assistant.knowledge.index import FaissKnowledgeIndex, KnowledgeIndex
from shopping_assistant.knowledge.ingest import ingest_from_source
from shopping_assistant.memory.store import (
    ConversationStore,
    InMemoryConversationStore,
    SQLiteConversationStore,
)
from shopping_assistant.memory.window import ContextWindow
from shopping_assistant.providers.base import CompletionProvider
from shopping_assistant.providers.openrouter import OpenRouterProvider
from shopping_assistant.tools.registry import ActionCatalog, build_shopping_catalog

logger = logging.getLogger("shopping.app")


@dataclass
class Services:
    """Everything the routes need, wired once per application."""

    settings: Settings
    conversations: ConversationStore
    items: ItemStore
    knowledge: KnowledgeIndex | None
    provider: CompletionProvider | None
    catalog: ActionCatalog
    window: ContextWindow
    orchestrator: AgentOrchestrator
    chat: ChatService
    metrics: MetricsCollector
    ingestion_error: str | None = None


def build_provider(settings: Settings) -> CompletionProvider | None:
    if not settings.provider_enabled:
        return None
    return OpenRouterProvider(
        settings.openrouter_api_key or "",
        model=settings.openrouter_model,
        base_url=settings.openrouter_base_url,
        referer=settings.openrouter_referer,
        title=settings.openrouter_title,
        timeout=settings.completion_timeout_seconds,
        max_tokens=settings.completion_max_tokens,
    )


def build_services(
    settings: Settings,
    *,
    provider: CompletionProvider | None = None,
    conversations: ConversationStore | None = None,
    items: ItemStore | None = None,
    knowledge: KnowledgeIndex | None = None,
) -> Services:
    """Construct stores, index, provider, catalog and orchestrator.

    Explicit arguments win over configuration, which is how tests inject doubles.
    """

    if conversations is None:
        conversations = (
            SQLiteConversationStore(settings.sqlite_path)
            if settings.persistence_enabled
            else InMemoryConversationStore()
        )
    if items is None:
        items = SQLiteItemStore(settings.items_db_path) if settings.persistence_enabled else InMemoryItemStore()
    if knowledge is None and settings.knowledge_enabled:
        knowledge = FaissKnowledgeIndex(
            top_k=settings.retrieval_top_k,
            similarity_threshold=settings.similarity_threshold,
            batch_size=settings.ingest_batch_size,
        )
    if provider is None:
        provider = build_provider(settings)

    catalog = build_shopping_catalog(items)
    window = ContextWindow(settings.context_window_size, loader=conversations.fetch_recent_turns)
    orchestrator = AgentOrchestrator(
        provider,
        catalog,
        window,
        knowledge,
        timeout=settings.completion_timeout_seconds,
        max_action_rounds=settings.max_action_rounds,
    )
    metrics = MetricsCollector()
    chat = ChatService(orchestrator, conversations, metrics)

    return Services(
        settings=settings,
        conversations=conversations,
        items=items,
        knowledge=knowledge,
        provider=provider,
        catalog=catalog,
        window=window,
        orchestrator=orchestrator,
        chat=chat,
        metrics=metrics,
    )


def create_app(settings: Settings | None = None, **overrides: Any) -> FastAPI:
    settings = settings or get_settings()
    services = build_services(settings, **overrides)

    app = FastAPI(title=settings.app_name, version="0.1.0", docs_url="/docs")
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(request_id_middleware)

    app.include_router(create_chat_router(services.chat))
    app.include_router(create_items_router(services.items))
    app.include_router(create_tools_router(services.catalog))

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ValidationError, validation_exception_handler)
    app.add_exception_handler(NotFoundError, not_found_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.on_event("startup")
    async def startup() -> None:
        level = configure_logging(settings.log_level)
        logger.info(
            "Logging configured at %s level for %s environment",
            logging.getLevelName(level),
            settings.environment,
        )
        if services.provider is None:
            logger.warning("OPENROUTER_API_KEY not set - chat replies will be placeholders")
        await initialize_knowledge(services)

    @app.on_event("shutdown")
    async def shutdown() -> None:
        if services.provider is not None:
            await services.provider.aclose()

    @app.get("/health", tags=["health"])
    async def health_check() -> dict[str, str]:
        """Return basic service status for monitoring."""

        return {"status": "ok"}

    @app.get("/ready", tags=["health"])
    async def readiness_probe() -> dict[str, Any]:
        """Readiness endpoint that verifies critical dependencies.

        Checks:
        - Conversation store reachable.
        - Item store reachable.
        - Knowledge index answers a trivial query (when enabled).
        - Completion provider configured.
        """

        components: dict[str, dict[str, Any]] = {
            "conversations": _probe(services.conversations.ping),
            "items": _probe(services.items.ping),
        }

        if services.knowledge is None:
            components["knowledge"] = {"ok": True, "enabled": False}
        else:
            knowledge_ok = await asyncio.to_thread(services.knowledge.is_ready)
            components["knowledge"] = {
                "ok": knowledge_ok and services.ingestion_error is None,
                "enabled": True,
                "documents": getattr(services.knowledge, "document_count", None),
                **({"error": services.ingestion_error} if services.ingestion_error else {}),
            }

        components["provider"] = {
            "ok": services.provider is not None,
            "name": services.provider.name if services.provider else None,
        }

        stores_ok = components["conversations"]["ok"] and components["items"]["ok"]
        if not stores_ok:
            overall = "fail"
        elif components["knowledge"]["ok"] and components["provider"]["ok"]:
            overall = "ok"
        else:
            overall = "degraded"

        return {
            "status": overall,
            "environment": settings.environment,
            "components": components,
        }

    @app.get("/metrics", tags=["metrics"])
    async def metrics_endpoint() -> dict:
        snapshot = services.metrics.snapshot()
        return {
            "total_turns": snapshot.total_turns,
            "turn_outcomes": snapshot.turn_outcomes,
            "action_calls": snapshot.action_calls,
        }

    return app


async def initialize_knowledge(services: Services) -> None:
    """Run the one-time ingestion pass; failures leave an empty, working index."""

    if services.knowledge is None:
        logger.info("Knowledge retrieval disabled")
        return

    settings = services.settings
    try:
        count = await asyncio.to_thread(
            ingest_from_source,
            services.knowledge,
            settings.knowledge_source_path,
            settings.ingest_batch_size,
        )
    except IngestionError as exc:
        services.ingestion_error = str(exc)
        logger.error("Knowledge ingestion failed; retrieval is unavailable: %s", exc)
        return

    services.ingestion_error = None
    logger.info("Knowledge index ready with %s documents", count)


def _probe(check) -> dict[str, Any]:
    try:
        return {"ok": bool(check())}
    except Exception as exc:  # noqa: BLE001
        return {"ok": False, "error": str(exc)}


app = create_app()
