"""
sendTelegramMessage capability: deliver agent output to the originating chat.

Messages only go to chats of workflows this process submitted. The request
id (from the call args or the task's input payload) must name a tracked
workflow; a chat id supplied alongside it must match that workflow's chat.
"""

import json
from typing import Any, Awaitable, Callable, Optional

from cryptoverifier.agents.schemas import SendTelegramMessageArgs
from cryptoverifier.logging_config import get_logger
from cryptoverifier.services.tracker import WorkflowTracker, get_workflow_tracker
from cryptoverifier.telegram_bot.telegram_api import deliver_report

logger = get_logger("delivery")

NO_CHAT = "No chat ID available"
UNKNOWN_REQUEST = "Unknown request ID"
CHAT_MISMATCH = "Chat ID does not match request"
DELIVERED_RESULTS = ("Message sent successfully", "Message sent as plain text")


class DeliveryRejected(Exception):
    """The call does not resolve to a chat of a tracked workflow."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


def task_metadata(action: Optional[dict[str, Any]]) -> dict[str, Any]:
    """chat_id / request_id embedded in the input of the task being executed."""
    task = (action or {}).get("task") or {}
    raw = task.get("input")
    if isinstance(raw, dict):
        return raw
    if not isinstance(raw, str):
        return {}
    try:
        payload = json.loads(raw)
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}


def resolve_destination(
    args: SendTelegramMessageArgs,
    action: Optional[dict[str, Any]],
    tracker: WorkflowTracker,
) -> tuple[int, str]:
    """
    Returns (chat_id, request_id) of the tracked workflow the call belongs to.

    Raises DeliveryRejected when there is no request id, the request is not
    tracked, or a supplied chat id differs from the workflow's chat.
    """
    metadata = task_metadata(action)
    request_id = args.request_id or metadata.get("request_id")
    if not request_id:
        raise DeliveryRejected(NO_CHAT)

    handle = tracker.get(str(request_id).upper())
    if handle is None:
        raise DeliveryRejected(UNKNOWN_REQUEST)

    claimed = args.chat_id if args.chat_id is not None else metadata.get("chat_id")
    if claimed is not None:
        try:
            claimed = int(claimed)
        except (TypeError, ValueError):
            raise DeliveryRejected(CHAT_MISMATCH)
        if claimed != handle.chat_id:
            raise DeliveryRejected(CHAT_MISMATCH)

    return handle.chat_id, handle.request_id


async def send_telegram_message(
    args: SendTelegramMessageArgs,
    action: Optional[dict[str, Any]] = None,
    *,
    tracker: Optional[WorkflowTracker] = None,
    send: Callable[[int, str], Awaitable[str]] = deliver_report,
) -> str:
    tracker = tracker or get_workflow_tracker()

    try:
        chat_id, request_id = resolve_destination(args, action, tracker)
    except DeliveryRejected as e:
        logger.warning(
            f"Delivery rejected (request_id={args.request_id!r}, chat_id={args.chat_id!r}): {e.reason}"
        )
        return e.reason

    result = await send(chat_id, args.content)
    logger.info(f"Delivery to chat_id={chat_id} (request {request_id}): {result}")

    if result in DELIVERED_RESULTS:
        tracker.mark_delivered(request_id)

    return result
