from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ContentCategory(str, Enum):
    URL = "url"
    TOKEN = "token"
    MESSAGE = "message"


class WorkflowStatus(str, Enum):
    SUBMITTED = "submitted"
    DELIVERED = "delivered"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


class ScanResult(BaseModel):
    matched: bool = False
    descriptions: list[str] = Field(default_factory=list)


class AnalysisRequest(BaseModel):
    """One user-initiated check. Never mutated after creation."""
    id: str
    category: ContentCategory
    content: str
    chat_id: int
    context_note: Optional[str] = None
    chain: str = "ethereum"  # token checks only

    model_config = {"frozen": True}


class HistoryEntry(BaseModel):
    id: str
    category: ContentCategory
    content: str
    timestamp: datetime = Field(default_factory=_utcnow)


class UserSession(BaseModel):
    chat_id: int
    last_interaction: datetime = Field(default_factory=_utcnow)
    analyses: list[HistoryEntry] = Field(default_factory=list)


class WorkflowTask(BaseModel):
    """One unit of remote work, before submission.

    `key` names the stage locally; `dependencies` are keys of tasks that
    appear earlier in the same workflow.
    """
    key: str
    description: str
    body: str
    assignee: int
    input: str
    expected_output: str
    dependencies: list[str] = Field(default_factory=list)


class WorkflowHandle(BaseModel):
    request_id: str
    chat_id: int
    category: ContentCategory
    status: WorkflowStatus = WorkflowStatus.SUBMITTED
    task_ids: dict[str, Any] = Field(default_factory=dict)  # stage key -> remote task id
    created_at: datetime = Field(default_factory=_utcnow)
    error: Optional[str] = None


# Capability (tool) call models

class SendTelegramMessageArgs(BaseModel):
    content: str = Field(..., min_length=1, description="The message content to send")
    chat_id: Optional[int] = Field(None, description="Destination Telegram chat id")
    request_id: Optional[str] = Field(None, description="Analysis request id the message belongs to")


class ToolCallRequest(BaseModel):
    args: dict[str, Any] = Field(default_factory=dict)
    action: Optional[dict[str, Any]] = None


class ToolCallResponse(BaseModel):
    result: str
