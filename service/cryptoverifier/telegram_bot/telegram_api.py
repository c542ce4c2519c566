"""
Telegram Bot API client for sending messages.

Used outside of handler context (workflow errors, follow-ups, reports
delivered on behalf of the agent platform), where no python-telegram-bot
Update is available.
"""

import httpx
from typing import Optional

from cryptoverifier.config import get_settings
from cryptoverifier.logging_config import get_logger
from cryptoverifier.utils.formatter import to_chat_markup, to_plain_text

logger = get_logger("telegram_api")

TELEGRAM_API_BASE = "https://api.telegram.org"


def _method_url(method: str) -> str:
    settings = get_settings()
    return f"{TELEGRAM_API_BASE}/bot{settings.telegram_bot_token}/{method}"


def describe_http_error(error: httpx.HTTPError) -> str:
    """Loggable error detail. The request URL carries the bot token, so it is left out."""
    if isinstance(error, httpx.HTTPStatusError):
        return f"Status {error.response.status_code}: {error.response.text}"
    return error.__class__.__name__


async def send_message(chat_id: int, text: str, parse_mode: Optional[str] = None) -> dict:
    """
    Send message to Telegram chat.

    Args:
        chat_id: Telegram chat ID
        text: Message text
        parse_mode: Optional parse mode (Markdown, MarkdownV2, HTML)

    Raises httpx.HTTPStatusError when Telegram rejects the message
    (e.g. unparseable markup).
    """
    payload = {
        "chat_id": chat_id,
        "text": text
    }

    if parse_mode:
        payload["parse_mode"] = parse_mode

    async with httpx.AsyncClient() as client:
        response = await client.post(_method_url("sendMessage"), json=payload)
        response.raise_for_status()
        return response.json()


async def notify_chat(chat_id: int, text: str) -> bool:
    """
    Best-effort plain-text notification.

    Transport errors are logged and swallowed. Returns True if sent.
    """
    try:
        await send_message(chat_id, text)
        return True
    except httpx.HTTPError as e:
        logger.error(f"Failed to notify chat_id={chat_id}: {describe_http_error(e)}")
        return False


async def deliver_report(chat_id: int, text: str) -> str:
    """
    Send a report with MarkdownV2 formatting, falling back to plain text.

    Returns a status string for the calling agent.
    """
    try:
        await send_message(chat_id, to_chat_markup(text), parse_mode="MarkdownV2")
        return "Message sent successfully"
    except httpx.HTTPError as e:
        logger.warning(f"Formatted message rejected for chat_id={chat_id}: {describe_http_error(e)}")

    try:
        await send_message(chat_id, to_plain_text(text))
        return "Message sent as plain text"
    except httpx.HTTPError as e:
        logger.error(f"Plain text fallback failed for chat_id={chat_id}: {describe_http_error(e)}")
        return "Failed to send message"
