"""OpenRouter (OpenAI-compatible chat completions) provider with tool calling."""

from __future__ import annotations

import json
import logging
from typing import Any, Sequence

import httpx

from shopping_assistant.core.errors import ProviderError
from shopping_assistant.providers.base import Completion, CompletionProvider, Exchange
from shopping_assistant.tools.base import ActionInvocation


class OpenRouterProvider(CompletionProvider):
    """Call ``/chat/completions`` with the action catalog as function tools."""

    name = "openrouter"

    def __init__(
        self,
        api_key: str,
        *,
        model: str = "openai/gpt-4o-mini",
        base_url: str = "https://openrouter.ai/api/v1",
        referer: str | None = None,
        title: str | None = None,
        timeout: float = 30.0,
        max_tokens: int = 1024,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not api_key:
            raise ValueError("api_key is required")
        self._model = model
        self._max_tokens = max_tokens
        self._logger = logging.getLogger("shopping.provider")

        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        if referer:
            headers["HTTP-Referer"] = referer
        if title:
            headers["X-Title"] = title

        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def generate(self, exchange: Exchange, actions: Sequence[dict[str, Any]]) -> Completion:
        payload: dict[str, Any] = {
            "model": self._model,
            "max_tokens": self._max_tokens,
            "messages": build_messages(exchange),
        }
        if actions:
            payload["tools"] = list(actions)
            payload["tool_choice"] = "auto"

        self._logger.debug(
            "Requesting completion from %s (%s messages, %s steps)",
            self._model,
            len(payload["messages"]),
            len(exchange.steps),
        )
        try:
            response = await self._client.post("/chat/completions", json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            raise ProviderError(
                f"Completion request rejected with HTTP {exc.response.status_code}: {exc.response.text[:200]}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ProviderError(f"Completion request failed: {exc}") from exc
        except ValueError as exc:
            raise ProviderError("Completion response was not valid JSON") from exc

        return parse_completion(data)


def build_messages(exchange: Exchange) -> list[dict[str, Any]]:
    """Render an exchange in the OpenAI chat format, replaying completed action steps."""

    messages: list[dict[str, Any]] = [{"role": "system", "content": exchange.system_prompt}]
    messages.extend({"role": turn.role.value, "content": turn.content} for turn in exchange.history)
    messages.append({"role": "user", "content": exchange.prompt})

    for step in exchange.steps:
        messages.append(
            {
                "role": "assistant",
                "content": step.text,
                "tool_calls": [
                    {
                        "id": invocation.call_id,
                        "type": "function",
                        "function": {
                            "name": invocation.name,
                            "arguments": json.dumps(invocation.arguments),
                        },
                    }
                    for invocation in step.invocations
                ],
            }
        )
        for invocation, result in zip(step.invocations, step.results, strict=True):
            messages.append(
                {
                    "role": "tool",
                    "tool_call_id": invocation.call_id,
                    "content": result.content,
                }
            )
    return messages


def parse_completion(data: Any) -> Completion:
    """Turn a chat-completions response body into a ``Completion``."""

    try:
        message = data["choices"][0]["message"]
    except (KeyError, IndexError, TypeError) as exc:
        raise ProviderError("Completion response had no message") from exc

    invocations: list[ActionInvocation] = []
    for call in message.get("tool_calls") or []:
        function = call.get("function") or {}
        name = function.get("name")
        if not name:
            raise ProviderError("Tool call without a function name")
        raw_arguments = function.get("arguments") or "{}"
        try:
            arguments = json.loads(raw_arguments) if isinstance(raw_arguments, str) else dict(raw_arguments)
        except (ValueError, TypeError) as exc:
            raise ProviderError(f"Malformed arguments for tool call {name}") from exc
        if not isinstance(arguments, dict):
            raise ProviderError(f"Arguments for tool call {name} must be an object")
        invocation = ActionInvocation(name=name, arguments=arguments)
        if call.get("id"):
            invocation.call_id = call["id"]
        invocations.append(invocation)

    content = message.get("content")
    text = content.strip() if isinstance(content, str) else None
    if not invocations and not text:
        raise ProviderError("Completion response contained neither text nor tool calls")
    return Completion(text=text or None, invocations=invocations)
