"""Tests for the HTTP boundary: routing, CORS allow-list and preflight."""

import pytest
from fastapi.testclient import TestClient

from caddie import config
from caddie.api.main import app, get_sessions

ALLOWED = "http://localhost:5173"
STRANGER = "https://evil.example"


class StubAgent:
    def __init__(self, result=None, error=None):
        self.result = result or {"answer": "hi there", "pending": []}
        self.error = error
        self.calls = []

    def on_chat_message(self, user_message=None, decisions=None, max_steps=10):
        self.calls.append({"user_message": user_message, "decisions": dict(decisions or {}), "max_steps": max_steps})
        if self.error:
            raise self.error
        return self.result


class StubSessions:
    def __init__(self, agent):
        self.agent = agent
        self.requested = []

    def get(self, session_id):
        self.requested.append(session_id)
        return self.agent


@pytest.fixture
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def use_agent():
    def _use(agent):
        sessions = StubSessions(agent)
        app.dependency_overrides[get_sessions] = lambda: sessions
        return sessions
    return _use


def test_preflight_for_allowed_origin(client):
    response = client.options("/agents/chat", headers={"Origin": ALLOWED})

    assert response.status_code == 204
    assert response.content == b""
    assert response.headers["access-control-allow-origin"] == ALLOWED
    assert response.headers["access-control-allow-credentials"] == "true"
    assert response.headers["access-control-allow-methods"] == "GET, POST, OPTIONS"
    assert response.headers["access-control-allow-headers"] == "Content-Type, Authorization"


def test_preflight_for_unlisted_origin(client):
    response = client.options("/agents/chat", headers={"Origin": STRANGER})

    assert response.status_code == 204
    assert response.headers["access-control-allow-origin"] == ""


def test_check_open_ai_key(client, monkeypatch):
    monkeypatch.setattr(config, "OPENAI_API_KEY", "sk-test")
    response = client.get("/check-open-ai-key", headers={"Origin": ALLOWED})

    assert response.json() == {"success": True}
    assert response.headers["access-control-allow-origin"] == ALLOWED

    monkeypatch.setattr(config, "OPENAI_API_KEY", "")
    assert client.get("/check-open-ai-key").json() == {"success": False}


def test_cors_headers_only_for_allowed_origins(client):
    response = client.get("/health", headers={"Origin": STRANGER})

    assert response.status_code == 200
    assert "access-control-allow-origin" not in response.headers


def test_unknown_path_is_not_found(client):
    response = client.get("/nowhere", headers={"Origin": ALLOWED})

    assert response.status_code == 404
    assert response.json() == {"error": "Not found"}
    assert response.headers["access-control-allow-origin"] == ALLOWED


def test_chat_delegates_to_agent(client, use_agent):
    agent = StubAgent(result={
        "answer": None,
        "pending": [{"call_id": "call_w", "tool_name": "getWeatherInformation",
                     "arguments": {"city": "Paris"}, "state": "pending"}],
    })
    sessions = use_agent(agent)

    response = client.post("/agents/chat", json={
        "session_id": "abc",
        "message": "Weather in Paris?",
        "decisions": {"call_x": "denied"},
    })

    assert response.status_code == 200
    body = response.json()
    assert body["answer"] is None
    assert body["pending"][0]["call_id"] == "call_w"
    assert sessions.requested == ["abc"]
    assert agent.calls == [{
        "user_message": "Weather in Paris?",
        "decisions": {"call_x": "denied"},
        "max_steps": config.DEFAULT_MAX_STEPS,
    }]


def test_chat_rejects_unknown_decision(client, use_agent):
    use_agent(StubAgent())

    response = client.post("/agents/chat", json={"decisions": {"call_x": "maybe"}})

    assert response.status_code == 422


def test_unexpected_error_keeps_cors_headers(client, use_agent):
    use_agent(StubAgent(error=RuntimeError("kaboom")))

    response = client.post("/agents/chat", json={"message": "hi"}, headers={"Origin": ALLOWED})

    assert response.status_code == 500
    assert response.json() == {"error": "Internal Server Error"}
    assert response.headers["access-control-allow-origin"] == ALLOWED
