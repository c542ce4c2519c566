"""
Tests for the HTTP surface: capability calls and workflow status.
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from cryptoverifier.agents.schemas import ContentCategory, WorkflowHandle
from cryptoverifier.api.tools import router as tools_router
from cryptoverifier.api.workflows import router as workflows_router
from cryptoverifier.services import delivery
from cryptoverifier.services.tracker import get_workflow_tracker
from cryptoverifier.telegram_bot import telegram_api


@pytest.fixture
def client():
    app = FastAPI()
    app.include_router(tools_router)
    app.include_router(workflows_router)
    return TestClient(app)


@pytest.fixture
def sent(monkeypatch):
    calls = []

    async def fake_send(args, action=None, **kwargs):
        calls.append((args, action))
        return "Message sent successfully"

    monkeypatch.setattr(delivery, "send_telegram_message", fake_send)
    return calls


class TestToolsEndpoint:
    def test_send_message(self, client, sent):
        response = client.post(
            "/tools/sendTelegramMessage",
            json={"args": {"content": "## Report", "chat_id": 12}, "action": {"task": {"id": 1}}},
        )

        assert response.status_code == 200
        assert response.json() == {"result": "Message sent successfully"}
        args, action = sent[0]
        assert args.content == "## Report"
        assert args.chat_id == 12
        assert action == {"task": {"id": 1}}

    def test_unknown_tool(self, client, sent):
        response = client.post("/tools/launchRocket", json={"args": {"content": "x"}})
        assert response.status_code == 404
        assert sent == []

    def test_missing_content(self, client, sent):
        response = client.post("/tools/sendTelegramMessage", json={"args": {}})
        assert response.status_code == 422
        assert sent == []

    def test_empty_content(self, client, sent):
        response = client.post("/tools/sendTelegramMessage", json={"args": {"content": ""}})
        assert response.status_code == 422


class TestWorkflowStatusEndpoint:
    def test_unknown_request(self, client):
        assert client.get("/workflows/ZZZZZ").status_code == 404

    def test_known_request_case_insensitive(self, client):
        get_workflow_tracker().register(
            WorkflowHandle(request_id="AB12C", chat_id=5, category=ContentCategory.TOKEN, task_ids={"scan": 101})
        )

        response = client.get("/workflows/ab12c")

        assert response.status_code == 200
        body = response.json()
        assert body["request_id"] == "AB12C"
        assert body["status"] == "submitted"
        assert body["category"] == "token"
        assert body["task_ids"] == {"scan": 101}


class TestMainApp:
    def test_health(self):
        from cryptoverifier.main import app

        response = TestClient(app).get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_webhook_rejects_wrong_secret(self, monkeypatch):
        from cryptoverifier.main import app

        monkeypatch.setenv("TELEGRAM_WEBHOOK_SECRET", "expected")
        response = TestClient(app).post(
            "/telegram/webhook",
            json={"update_id": 1},
            headers={"X-Telegram-Bot-Api-Secret-Token": "wrong"},
        )
        assert response.status_code == 403


class TestToolsAccessControl:
    def test_wrong_secret_rejected(self, client, sent, monkeypatch):
        monkeypatch.setenv("TOOLS_SECRET", "shared")
        response = client.post(
            "/tools/sendTelegramMessage",
            json={"args": {"content": "x"}},
            headers={"X-Tools-Secret": "guess"},
        )
        assert response.status_code == 403
        assert sent == []

    def test_missing_secret_rejected(self, client, sent, monkeypatch):
        monkeypatch.setenv("TOOLS_SECRET", "shared")
        response = client.post("/tools/sendTelegramMessage", json={"args": {"content": "x"}})
        assert response.status_code == 403

    def test_correct_secret_accepted(self, client, sent, monkeypatch):
        monkeypatch.setenv("TOOLS_SECRET", "shared")
        response = client.post(
            "/tools/sendTelegramMessage",
            json={"args": {"content": "x"}},
            headers={"X-Tools-Secret": "shared"},
        )
        assert response.status_code == 200
        assert len(sent) == 1

    def test_untracked_chat_not_messaged(self, client, monkeypatch):
        outgoing = []

        async def fake_send_message(chat_id, text, parse_mode=None):
            outgoing.append(chat_id)
            return {"ok": True}

        monkeypatch.setattr(telegram_api, "send_message", fake_send_message)

        response = client.post(
            "/tools/sendTelegramMessage",
            json={"args": {"content": "Your wallet is compromised, visit evil.example", "chat_id": 99999}},
        )

        assert response.status_code == 200
        assert response.json() == {"result": "No chat ID available"}
        assert outgoing == []

    def test_tracked_request_delivered(self, client, monkeypatch):
        outgoing = []

        async def fake_send_message(chat_id, text, parse_mode=None):
            outgoing.append(chat_id)
            return {"ok": True}

        monkeypatch.setattr(telegram_api, "send_message", fake_send_message)
        get_workflow_tracker().register(
            WorkflowHandle(request_id="AB12C", chat_id=5, category=ContentCategory.URL)
        )

        response = client.post(
            "/tools/sendTelegramMessage",
            json={"args": {"content": "report"}, "action": {"task": {"input": '{"request_id": "AB12C", "chat_id": 5}'}}},
        )

        assert response.json() == {"result": "Message sent successfully"}
        assert outgoing == [5]
