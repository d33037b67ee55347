"""Tests for webhook routes."""

import hashlib
import hmac
import json
import time
from urllib.parse import urlencode

import pytest
from fastapi.testclient import TestClient

from zenai.adapters.slack import SlackAdapter
from zenai.core.app_state import AppState
from zenai.db import get_db
from zenai.main import create_app

SIGNING_SECRET = "test-signing-secret"


def signed_headers(body: bytes, content_type="application/json"):
    timestamp = str(int(time.time()))
    base = f"v0:{timestamp}:".encode() + body
    signature = "v0=" + hmac.new(SIGNING_SECRET.encode(), base, hashlib.sha256).hexdigest()
    return {
        "Content-Type": content_type,
        "X-Slack-Request-Timestamp": timestamp,
        "X-Slack-Signature": signature,
    }


@pytest.fixture
def state(app_state, slack_adapter):
    # Real signature checks, mocked Slack Web API.
    real = SlackAdapter(bot_token="xoxb-test", signing_secret=SIGNING_SECRET)
    slack_adapter.verify_webhook.side_effect = real.verify_webhook
    slack_adapter.parse_webhook.side_effect = real.parse_webhook
    return app_state


@pytest.fixture
def client(db, state):
    app = create_app(testing=True, state=state)

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def event_callback(event):
    return {"type": "event_callback", "team_id": "T1", "event_id": "Ev1", "event": event}


def post_event(client, payload):
    body = json.dumps(payload).encode()
    return client.post("/webhooks/slack/events", content=body, headers=signed_headers(body))


def test_url_verification(client):
    resp = client.post(
        "/webhooks/slack/events",
        json={"type": "url_verification", "challenge": "3eZbrw1aBm2rZgRNFdxV2595E9CY3gmdALWMmHkvFXO7tYXAYM8P"},
    )
    assert resp.status_code == 200
    assert resp.json() == {"challenge": "3eZbrw1aBm2rZgRNFdxV2595E9CY3gmdALWMmHkvFXO7tYXAYM8P"}


def test_bad_signature_is_rejected(client):
    body = json.dumps(event_callback({"type": "app_mention"})).encode()
    headers = signed_headers(body)
    headers["X-Slack-Signature"] = "v0=deadbeef"
    resp = client.post("/webhooks/slack/events", content=body, headers=headers)
    assert resp.status_code == 403


def test_invalid_json(client):
    resp = client.post("/webhooks/slack/events", content=b"not json")
    assert resp.status_code == 400


def test_slack_disabled(db, llm, session_factory):
    state = AppState(adapter=None, llm=llm, session_factory=session_factory)
    app = create_app(testing=True, state=state)
    with TestClient(app) as c:
        resp = c.post("/webhooks/slack/events", json=event_callback({"type": "app_mention"}))
    assert resp.status_code == 503


def test_mention_is_acknowledged_and_processed(client, state, slack_adapter, llm):
    payload = event_callback(
        {
            "type": "app_mention",
            "user": "U1",
            "channel": "C1",
            "ts": "1700000000.000100",
            "client_msg_id": "m-1",
            "text": "<@UBOT> hello",
        }
    )
    resp = post_event(client, payload)

    assert resp.status_code == 200
    assert resp.json() == {"ok": True}
    # TestClient runs background tasks before returning.
    llm.complete.assert_awaited_once()
    assert not state.admission.is_locked(("U1", "C1"))


def test_redelivery_is_acknowledged_but_not_processed(client, llm):
    payload = event_callback(
        {
            "type": "message",
            "channel_type": "im",
            "user": "U1",
            "channel": "D1",
            "ts": "1700000000.000200",
            "text": "hi",
        }
    )
    assert post_event(client, payload).json() == {"ok": True}
    assert post_event(client, payload).json() == {"ok": True}
    assert llm.complete.await_count == 1


def test_malformed_event_is_acknowledged(client, llm):
    resp = post_event(client, event_callback({"type": "app_mention", "ts": "1.1"}))
    assert resp.status_code == 200
    llm.complete.assert_not_awaited()


def test_slash_command(client, state):
    body = urlencode(
        {"command": "/mute", "text": "", "user_id": "U1", "channel_id": "C1"}
    ).encode()
    resp = client.post(
        "/webhooks/slack/commands",
        content=body,
        headers=signed_headers(body, "application/x-www-form-urlencoded"),
    )
    assert resp.status_code == 200
    assert resp.json()["response_type"] == "ephemeral"
    assert state.mutes.is_muted("U1")


def test_slash_command_bad_signature(client):
    body = urlencode({"command": "/help", "user_id": "U1", "channel_id": "C1"}).encode()
    headers = signed_headers(body, "application/x-www-form-urlencoded")
    headers["X-Slack-Signature"] = "v0=00"
    resp = client.post("/webhooks/slack/commands", content=body, headers=headers)
    assert resp.status_code == 403
