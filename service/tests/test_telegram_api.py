"""
Tests for report delivery over the Telegram Bot API (transport mocked).
"""

import logging

import httpx
import pytest

from cryptoverifier.config import get_settings
from cryptoverifier.telegram_bot import telegram_api

pytestmark = pytest.mark.anyio

REQUEST = httpx.Request("POST", "https://api.telegram.org/botTOKEN/sendMessage")


def _bad_request() -> httpx.HTTPStatusError:
    response = httpx.Response(400, text="can't parse entities", request=REQUEST)
    return httpx.HTTPStatusError("Bad Request", request=REQUEST, response=response)


class TestDeliverReport:
    async def test_markdown_first(self, monkeypatch):
        calls = []

        async def fake_send(chat_id, text, parse_mode=None):
            calls.append((chat_id, text, parse_mode))
            return {"ok": True}

        monkeypatch.setattr(telegram_api, "send_message", fake_send)

        result = await telegram_api.deliver_report(7, "## Risk\nScore: 9.5")

        assert result == "Message sent successfully"
        assert calls == [(7, "*Risk*\nScore: 9\\.5", "MarkdownV2")]

    async def test_plain_text_fallback(self, monkeypatch):
        calls = []

        async def fake_send(chat_id, text, parse_mode=None):
            calls.append((text, parse_mode))
            if parse_mode:
                raise _bad_request()
            return {"ok": True}

        monkeypatch.setattr(telegram_api, "send_message", fake_send)

        result = await telegram_api.deliver_report(7, "## Risk\n**High**")

        assert result == "Message sent as plain text"
        assert calls[1] == ("Risk\nHigh", None)

    async def test_both_attempts_fail(self, monkeypatch):
        async def fake_send(chat_id, text, parse_mode=None):
            raise httpx.ConnectError("unreachable", request=REQUEST)

        monkeypatch.setattr(telegram_api, "send_message", fake_send)

        assert await telegram_api.deliver_report(7, "report") == "Failed to send message"


class TestNotifyChat:
    async def test_swallows_transport_errors(self, monkeypatch):
        async def fake_send(chat_id, text, parse_mode=None):
            raise _bad_request()

        monkeypatch.setattr(telegram_api, "send_message", fake_send)

        assert await telegram_api.notify_chat(7, "hello") is False

    async def test_sends_plain_text(self, monkeypatch):
        calls = []

        async def fake_send(chat_id, text, parse_mode=None):
            calls.append((chat_id, text, parse_mode))
            return {"ok": True}

        monkeypatch.setattr(telegram_api, "send_message", fake_send)

        assert await telegram_api.notify_chat(7, "hello") is True
        assert calls == [(7, "hello", None)]


class TestErrorLogging:
    @pytest.fixture
    def log_records(self, caplog):
        # The package logger does not propagate to root, so attach directly
        logger = logging.getLogger("cryptoverifier.telegram_api")
        logger.addHandler(caplog.handler)
        yield caplog
        logger.removeHandler(caplog.handler)

    @pytest.fixture
    def telegram_rejects(self, monkeypatch):
        real_client = httpx.AsyncClient

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, text="Bad Request: can't parse entities")

        monkeypatch.setattr(
            telegram_api.httpx, "AsyncClient",
            lambda **kwargs: real_client(transport=httpx.MockTransport(handler)),
        )

    async def test_bot_token_not_logged(self, telegram_rejects, log_records):
        token = get_settings().telegram_bot_token

        result = await telegram_api.deliver_report(1, "**report**")

        assert result == "Failed to send message"
        assert log_records.records
        assert all(token not in record.getMessage() for record in log_records.records)
        assert "Status 400: Bad Request: can't parse entities" in log_records.text

    async def test_request_error_logs_class_name(self, monkeypatch, log_records):
        async def fake_send(chat_id, text, parse_mode=None):
            raise httpx.ConnectError("unreachable", request=REQUEST)

        monkeypatch.setattr(telegram_api, "send_message", fake_send)

        await telegram_api.notify_chat(7, "hello")

        assert "Failed to notify chat_id=7: ConnectError" in log_records.text
        assert "TOKEN" not in log_records.text
