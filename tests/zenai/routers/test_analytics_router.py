"""Tests for analytics and health routes."""

import uuid

import pytest
from fastapi.testclient import TestClient

from zenai.db import get_db
from zenai.main import create_app


@pytest.fixture
def client(db, app_state):
    app = create_app(testing=True, state=app_state)

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def test_user_stats(client, setup_turns, slack_user):
    resp = client.get(f"/analytics/users/{slack_user.platform_user_id}/stats")
    assert resp.status_code == 200
    data = resp.json()
    assert data["slack_user_id"] == slack_user.platform_user_id
    assert data["stats"] == {
        "total_conversations": 1,
        "total_queries": 3,
        "total_responses": 3,
        "total_reactions": 2,
    }


def test_user_stats_unknown_user(client):
    assert client.get("/analytics/users/U404/stats").status_code == 404


def test_conversation_history(client, setup_turns, conversation):
    resp = client.get(f"/analytics/conversations/{conversation.id}/history")
    assert resp.status_code == 200
    data = resp.json()
    assert data["conversation"]["id"] == str(conversation.id)
    assert [m["role"] for m in data["messages"]] == [
        "user",
        "assistant",
        "user",
        "assistant",
        "user",
    ]
    assert data["messages"][3]["reactions"][0]["emoji_name"] == "+1"


def test_conversation_history_not_found(client):
    resp = client.get(f"/analytics/conversations/{uuid.uuid4()}/history")
    assert resp.status_code == 404


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert data["slack_enabled"] is True
    assert data["sweeper_running"] is True
