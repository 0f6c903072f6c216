from __future__ import annotations

import asyncio
import os
from pathlib import Path

# Keep the module-level app in shopping_assistant.main off disk and offline.
os.environ["PERSISTENCE_ENABLED"] = "false"
os.environ["KNOWLEDGE_ENABLED"] = "false"
os.environ["OPENROUTER_API_KEY"] = ""

import pytest  # noqa: E402

from shopping_assistant.core.config import get_settings  # noqa: E402
from shopping_assistant.core.errors import ProviderError  # noqa: E402
from shopping_assistant.providers.base import Completion, CompletionProvider  # noqa: E402
from shopping_assistant.tools.base import ActionInvocation  # noqa: E402

get_settings.cache_clear()


class ScriptedProvider(CompletionProvider):
    """Completion provider double that replays a fixed script.

    Each script entry is a ``Completion``, a plain string (final text), an
    exception to raise, or a callable taking the exchange (sync or async).
    """

    name = "scripted"

    def __init__(self, *script) -> None:
        self.script = list(script)
        self.calls: list[dict] = []

    async def generate(self, exchange, actions):
        self.calls.append(
            {
                "system_prompt": exchange.system_prompt,
                "prompt": exchange.prompt,
                "history": list(exchange.history),
                "steps": [
                    [result.content for result in step.results] for step in exchange.steps
                ],
                "actions": [action["function"]["name"] for action in actions],
            }
        )
        if not self.script:
            raise ProviderError("script exhausted")

        step = self.script.pop(0)
        if isinstance(step, BaseException):
            raise step
        if callable(step):
            step = step(exchange)
            if asyncio.iscoroutine(step):
                step = await step
        if isinstance(step, str):
            return Completion(text=step)
        return step


def request_actions(*calls: tuple[str, dict]) -> Completion:
    return Completion(invocations=[ActionInvocation(name=name, arguments=args) for name, args in calls])


@pytest.fixture
def scripted_provider():
    return ScriptedProvider


@pytest.fixture
def actions():
    return request_actions


@pytest.fixture(scope="session")
def knowledge_csv(tmp_path_factory) -> Path:
    path = tmp_path_factory.mktemp("knowledge") / "knowledge.csv"
    path.write_text(
        "item,aisle,notes\n"
        "Milk,Aisle 1,Keep refrigerated\n"
        "Bread,Aisle 4,\n"
        "Olive oil,Aisle 6,Extra virgin and light\n",
        encoding="utf-8",
    )
    return path
