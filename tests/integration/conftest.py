"""Pytest integration test fixtures."""

import pytest
from fastapi.testclient import TestClient

from shopping_assistant.core.config import Settings
from shopping_assistant.main import create_app


@pytest.fixture()
def settings():
    return Settings(persistence_enabled=False, knowledge_enabled=False, openrouter_api_key=None)


@pytest.fixture()
def make_client(settings):
    clients = []

    def factory(provider=None, settings_override=None, **overrides):
        app = create_app(settings_override or settings, provider=provider, **overrides)
        client = TestClient(app, raise_server_exceptions=False)
        client.__enter__()
        clients.append(client)
        return client

    yield factory

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture()
def client(make_client):
    return make_client()
