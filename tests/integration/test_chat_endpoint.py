from shopping_assistant.agent.prompt import FALLBACK_REPLY
from shopping_assistant.core.errors import ProviderError


def test_chat_starts_conversation_and_runs_actions(make_client, scripted_provider, actions):
    client = make_client(scripted_provider(actions(("addItem", {"name": "milk", "quantity": 2})), "Added 2 milk."))

    response = client.post("/chat", json={"text": "Add 2 milk"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["conversationKey"]
    assert payload["assistantTurn"]["content"] == "Added 2 milk."
    assert payload["outcome"] == "complete"
    assert payload["actions"][0]["name"] == "addItem"

    items = client.get("/api/items").json()
    assert [(item["name"], item["quantity"]) for item in items] == [("milk", 2)]

    metrics_payload = client.get("/metrics").json()
    assert metrics_payload["total_turns"] == 1
    assert metrics_payload["action_calls"] == {"addItem": 1}


def test_chat_history_round_trip(make_client, scripted_provider):
    client = make_client(scripted_provider("Hi!", "Still here."))

    key = client.post("/chat", json={"text": "hello"}).json()["conversationKey"]
    client.post("/chat", json={"text": "again", "conversationKey": key})

    response = client.get(f"/chat/{key}")

    assert response.status_code == 200
    turns = response.json()["turns"]
    assert [turn["content"] for turn in turns] == ["hello", "Hi!", "again", "Still here."]
    assert [turn["role"] for turn in turns] == ["user", "assistant", "user", "assistant"]
    assert key in client.get("/conversations").json()


def test_chat_unknown_conversation_returns_404(client):
    response = client.post("/chat", json={"text": "hello", "conversationKey": "missing"})

    assert response.status_code == 404
    assert response.json()["error"] == "not_found"
    assert client.get("/chat/missing").status_code == 404


def test_chat_missing_text_returns_400(client):
    response = client.post("/chat", json={"conversationKey": "conv-err"})

    assert response.status_code == 400
    assert response.json()["error"] == "validation_error"


def test_chat_blank_text_returns_400(client):
    response = client.post("/chat", json={"text": "   "})

    assert response.status_code == 400


def test_chat_oversized_text_returns_400(client):
    response = client.post("/chat", json={"text": "x" * 10001})

    assert response.status_code == 400


def test_chat_length_limit_applies_to_trimmed_text(client):
    response = client.post("/chat", json={"text": "   " + "x" * 10000 + "   "})

    assert response.status_code == 200
    assert response.json()["userTurn"]["content"] == "x" * 10000


def test_chat_provider_failure_returns_fallback(make_client, scripted_provider):
    client = make_client(scripted_provider(ProviderError("HTTP 500")))

    response = client.post("/chat", json={"text": "Add milk"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["assistantTurn"]["content"] == FALLBACK_REPLY
    assert payload["outcome"] == "fallback"
    assert client.get("/api/items").json() == []


def test_chat_without_provider_returns_placeholder(client):
    response = client.post("/chat", json={"text": "Add milk"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["outcome"] == "placeholder"
    assert payload["assistantTurn"]["content"].startswith('I received your message: "Add milk"')


def test_chat_uses_knowledge_from_startup_ingestion(make_client, scripted_provider, settings, knowledge_csv):
    provider = scripted_provider("Aisle 6.")
    client = make_client(
        provider,
        settings_override=settings.model_copy(
            update={
                "knowledge_enabled": True,
                "knowledge_source_path": knowledge_csv,
            }
        ),
    )

    client.post("/chat", json={"text": "olive oil"})

    prompt = provider.calls[0]["prompt"]
    assert prompt.startswith("Context from knowledge base:")
    assert "item: Olive oil" in prompt
    assert client.get("/ready").json()["components"]["knowledge"]["documents"] == 3
