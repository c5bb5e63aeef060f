"""
Unit Tests for Models Endpoint

Tests the /v1/models endpoint.
"""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from dbchat.agent.registry import GOOGLE_MODELS, OPENAI_MODELS
from dbchat.api.main import app, app_state


@pytest.fixture
def manager():
    manager = MagicMock()
    app_state["manager"] = manager
    yield manager
    app_state["manager"] = None


@pytest.fixture
def client(manager):
    return TestClient(app)


def test_lists_available_models(client, manager):
    manager.get_available_models.return_value = list(GOOGLE_MODELS)
    manager.default_model = "gemini-2.5-flash"

    response = client.get("/v1/models")

    assert response.status_code == 200
    data = response.json()
    assert [m["slug"] for m in data["models"]] == [m.slug for m in GOOGLE_MODELS]
    assert data["models"][0]["provider"] == "google"
    assert data["default_model"] == "gemini-2.5-flash"


def test_default_falls_back_to_first_available(client, manager):
    manager.get_available_models.return_value = list(OPENAI_MODELS)
    manager.default_model = "gemini-2.5-flash"

    data = client.get("/v1/models").json()

    assert data["default_model"] == "gpt-4o"


def test_no_providers_configured(client, manager):
    manager.get_available_models.return_value = []
    manager.default_model = "gemini-2.5-flash"

    data = client.get("/v1/models").json()

    assert data == {"models": [], "default_model": None}
