import asyncio
import json

import httpx
import pytest

from shopping_assistant.core.errors import ProviderError
from shopping_assistant.memory.models import ConversationTurn, Role
from shopping_assistant.providers.base import ActionStep, Exchange
from shopping_assistant.providers.openrouter import OpenRouterProvider, build_messages, parse_completion
from shopping_assistant.tools.base import ActionInvocation, ToolResponse

ADD_ITEM = {"type": "function", "function": {"name": "addItem", "description": "Add", "parameters": {}}}


def exchange(**kwargs):
    return Exchange(system_prompt="be helpful", history=kwargs.pop("history", []), prompt="Add milk", **kwargs)


def run_generate(handler, ex=None, actions=(ADD_ITEM,)):
    async def go():
        provider = OpenRouterProvider(
            "test-key",
            title="Shopping Assistant",
            transport=httpx.MockTransport(handler),
        )
        try:
            return await provider.generate(ex or exchange(), list(actions))
        finally:
            await provider.aclose()

    return asyncio.run(go())


def message_response(message):
    return httpx.Response(200, json={"choices": [{"message": message}]})


def test_generate_posts_chat_completion_with_tools():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["headers"] = request.headers
        seen["body"] = json.loads(request.content)
        return message_response({"role": "assistant", "content": "Sure."})

    completion = run_generate(handler)

    assert completion.text == "Sure."
    assert completion.wants_actions is False
    assert seen["url"] == "https://openrouter.ai/api/v1/chat/completions"
    assert seen["headers"]["authorization"] == "Bearer test-key"
    assert seen["headers"]["x-title"] == "Shopping Assistant"
    assert seen["body"]["model"] == "openai/gpt-4o-mini"
    assert seen["body"]["tools"] == [ADD_ITEM]
    assert seen["body"]["tool_choice"] == "auto"
    assert seen["body"]["messages"][0] == {"role": "system", "content": "be helpful"}


def test_generate_parses_tool_calls():
    def handler(request):
        return message_response(
            {
                "role": "assistant",
                "content": None,
                "tool_calls": [
                    {
                        "id": "call_abc",
                        "type": "function",
                        "function": {"name": "addItem", "arguments": '{"name": "milk", "quantity": 2}'},
                    }
                ],
            }
        )

    completion = run_generate(handler)

    assert completion.wants_actions is True
    invocation = completion.invocations[0]
    assert invocation.name == "addItem"
    assert invocation.arguments == {"name": "milk", "quantity": 2}
    assert invocation.call_id == "call_abc"


def test_http_error_becomes_provider_error():
    def handler(request):
        return httpx.Response(503, text="upstream unavailable")

    with pytest.raises(ProviderError, match="503"):
        run_generate(handler)


def test_transport_failure_becomes_provider_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ProviderError):
        run_generate(handler)


def test_invalid_json_becomes_provider_error():
    def handler(request):
        return httpx.Response(200, text="<html>")

    with pytest.raises(ProviderError):
        run_generate(handler)


def test_build_messages_replays_history_and_steps():
    invocation = ActionInvocation(name="addItem", arguments={"name": "milk"}, call_id="call_1")
    ex = exchange(
        history=[
            ConversationTurn(conversation_id="c", role=Role.USER, content="hi"),
            ConversationTurn(conversation_id="c", role=Role.ASSISTANT, content="hello"),
        ],
        steps=[ActionStep(invocations=[invocation], results=[ToolResponse(content="Added milk")])],
    )

    messages = build_messages(ex)

    assert [message["role"] for message in messages] == ["system", "user", "assistant", "user", "assistant", "tool"]
    assert messages[4]["tool_calls"][0]["function"] == {"name": "addItem", "arguments": '{"name": "milk"}'}
    assert messages[5] == {"role": "tool", "tool_call_id": "call_1", "content": "Added milk"}


@pytest.mark.parametrize(
    "data",
    [
        {},
        {"choices": []},
        {"choices": [{"message": {"content": ""}}]},
        {"choices": [{"message": {"tool_calls": [{"function": {"arguments": "{}"}}]}}]},
        {"choices": [{"message": {"tool_calls": [{"function": {"name": "addItem", "arguments": "{oops"}}]}}]},
        {"choices": [{"message": {"tool_calls": [{"function": {"name": "addItem", "arguments": "[1]"}}]}}]},
    ],
)
def test_parse_completion_rejects_malformed_responses(data):
    with pytest.raises(ProviderError):
        parse_completion(data)


def test_requires_api_key():
    with pytest.raises(ValueError):
        OpenRouterProvider("")


def test_build_messages_keeps_text_sent_with_tool_calls():
    invocation = ActionInvocation(name="listItems", call_id="call_2")
    ex = exchange(
        steps=[
            ActionStep(
                invocations=[invocation],
                results=[ToolResponse(content="Your shopping list is empty.")],
                text="Let me check your list.",
            )
        ]
    )

    assistant = build_messages(ex)[2]

    assert assistant["role"] == "assistant"
    assert assistant["content"] == "Let me check your list."
    assert assistant["tool_calls"][0]["id"] == "call_2"
