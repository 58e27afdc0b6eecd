"""Chat proxy to the agent webhook."""

import json

import httpx
import pytest

from app.config.settings import settings
from tests.conftest import create_user

AGENT_URL = "https://agent.example.com/webhook/chat"


@pytest.fixture
def agent_url(monkeypatch):
    monkeypatch.setattr(settings, "agent_webhook_url", AGENT_URL)
    return AGENT_URL


class TestChatProxy:
    def test_forwards_conversation_and_streams_reply(self, user_client, user, agent_url, http_requests, http_handler):
        http_handler["handler"] = lambda request: httpx.Response(
            200,
            content=b"data: hello\n\ndata: world\n\n",
            headers={"content-type": "text/event-stream"}
        )
        response = user_client.post("/api/chat", json={
            "messages": [{"role": "user", "content": "Hi"}, {"role": "assistant", "content": "Hello"}],
            "input": "Summarise this",
            "session_id": "conv-1",
        })
        assert response.status_code == 200
        assert response.content == b"data: hello\n\ndata: world\n\n"
        assert response.headers["content-type"].startswith("text/event-stream")
        assert response.headers["x-session-id"] == "conv-1"

        sent = http_requests[0]
        assert str(sent.url) == AGENT_URL
        payload = json.loads(sent.content)
        assert payload == {
            "messages": [{"role": "user", "content": "Hi"}, {"role": "assistant", "content": "Hello"}],
            "input": "Summarise this",
            "session_id": "conv-1",
            "user_id": user["id"],
        }

    def test_document_input_and_generated_session_id(self, user_client, agent_url, http_requests):
        response = user_client.post("/api/chat", json={
            "input": {"text": "What is this?", "document": {"pages": 2}, "images": ["data:image/png;base64,AAA"]},
        })
        assert response.status_code == 200
        assert response.json() == {"ok": True}

        payload = json.loads(http_requests[0].content)
        assert payload["messages"] == []
        assert payload["input"] == {
            "text": "What is this?",
            "document": {"pages": 2},
            "images": ["data:image/png;base64,AAA"],
        }
        assert payload["session_id"] == response.headers["x-session-id"]

    def test_upstream_status_is_preserved(self, user_client, agent_url, http_handler):
        http_handler["handler"] = lambda request: httpx.Response(202, json={"queued": True})
        response = user_client.post("/api/chat", json={"input": "hi"})
        assert response.status_code == 202
        assert response.json() == {"queued": True}

    def test_missing_configuration(self, user_client, monkeypatch, http_requests):
        monkeypatch.setattr(settings, "agent_webhook_url", "")
        response = user_client.post("/api/chat", json={"input": "hi"})
        assert response.status_code == 500
        assert response.json() == {"error": "Agent webhook URL not configured"}
        assert http_requests == []

    def test_upstream_error_status(self, user_client, agent_url, http_handler):
        http_handler["handler"] = lambda request: httpx.Response(503, text="overloaded")
        response = user_client.post("/api/chat", json={"input": "hi"})
        assert response.status_code == 500
        assert response.json() == {"error": "Agent webhook returned 503"}

    def test_network_error(self, user_client, agent_url, http_handler):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        http_handler["handler"] = handler
        response = user_client.post("/api/chat", json={"input": "hi"})
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to reach agent webhook"}

    def test_empty_request(self, user_client, agent_url, http_requests):
        response = user_client.post("/api/chat", json={})
        assert response.status_code == 400
        assert http_requests == []

    def test_unknown_role(self, user_client, agent_url, http_requests):
        response = user_client.post("/api/chat", json={"messages": [{"role": "robot", "content": "beep"}]})
        assert response.status_code == 400
        assert http_requests == []

    def test_requires_user_session(self, client, agent_url, http_requests):
        response = client.post("/api/chat", json={"input": "hi"})
        assert response.status_code == 401
        assert http_requests == []

    def test_malformed_webhook_url(self, user_client, monkeypatch, http_requests):
        monkeypatch.setattr(settings, "agent_webhook_url", "http://agent.example.com:notaport/chat")
        response = user_client.post("/api/chat", json={"input": "hi"})
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to reach agent webhook"}
        assert http_requests == []


def _agent(fake_db, name, **extra):
    values = {"name": name, "system_prompt": f"You are {name}.", **extra}
    return fake_db.table("agents").insert(values).execute().data[0]


class TestChatWithAgent:
    def test_agent_webhook_and_prompt_are_used(self, user_client, fake_db, user, agent_url, http_requests):
        agent = _agent(
            fake_db, "Researcher",
            webhook_url="https://agents.example.com/research",
            category="research",
            is_global=False
        )
        fake_db.table("user_agents").insert({"agent_id": agent["id"], "user_id": user["id"]}).execute()

        response = user_client.post("/api/chat", json={
            "input": "Find papers",
            "agentId": agent["id"],
            "context": {"category": "general", "sub_project_name": "Specs"},
        })
        assert response.status_code == 200

        sent = http_requests[0]
        assert str(sent.url) == "https://agents.example.com/research"
        payload = json.loads(sent.content)
        assert payload["system_prompt"] == "You are Researcher."
        assert payload["agent_name"] == "Researcher"
        assert payload["category"] == "research"
        assert payload["sub_project_name"] == "Specs"
        assert payload["user_id"] == user["id"]

    def test_agent_without_webhook_falls_back(self, user_client, fake_db, agent_url, http_requests):
        agent = _agent(fake_db, "Helper")
        response = user_client.post("/api/chat", json={"input": "hi", "agentId": agent["id"]})
        assert response.status_code == 200
        assert str(http_requests[0].url) == AGENT_URL
        assert json.loads(http_requests[0].content)["system_prompt"] == "You are Helper."

    def test_context_without_agent(self, user_client, agent_url, http_requests):
        user_client.post("/api/chat", json={"input": "hi", "context": {"project_id": "p-1"}})
        payload = json.loads(http_requests[0].content)
        assert payload["project_id"] == "p-1"
        assert "system_prompt" not in payload

    def test_unassigned_private_agent_is_refused(self, user_client, fake_db, agent_url, http_requests):
        other = create_user(fake_db, email="other@example.com")
        agent = _agent(fake_db, "Private", is_global=False, webhook_url="https://agents.example.com/p")
        fake_db.table("user_agents").insert({"agent_id": agent["id"], "user_id": other["id"]}).execute()

        response = user_client.post("/api/chat", json={"input": "hi", "agentId": agent["id"]})
        assert response.status_code == 404
        assert response.json() == {"error": "Agent not found or access denied"}
        assert http_requests == []

    def test_inactive_and_unknown_agents_are_refused(self, user_client, fake_db, agent_url, http_requests):
        retired = _agent(fake_db, "Retired", is_active=False)
        for agent_id in (retired["id"], "missing"):
            response = user_client.post("/api/chat", json={"input": "hi", "agentId": agent_id})
            assert response.status_code == 404
        assert http_requests == []
