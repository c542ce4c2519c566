"""
In-memory registry of submitted workflows.

Lets the delivery capability and the follow-up watcher correlate a request
id back to its chat without any process-wide "current chat" state.
Bounded at write time: registering past the limit evicts the oldest handles.
"""

from collections import OrderedDict
from typing import Optional

from cryptoverifier.agents.schemas import WorkflowHandle, WorkflowStatus

DEFAULT_TRACKED_LIMIT = 1000


class WorkflowTracker:
    def __init__(self, limit: int = DEFAULT_TRACKED_LIMIT):
        self.limit = limit
        self._handles: OrderedDict[str, WorkflowHandle] = OrderedDict()

    def register(self, handle: WorkflowHandle) -> WorkflowHandle:
        self._handles[handle.request_id] = handle
        self._handles.move_to_end(handle.request_id)
        while len(self._handles) > self.limit:
            self._handles.popitem(last=False)
        return handle

    def get(self, request_id: str) -> Optional[WorkflowHandle]:
        return self._handles.get(request_id)

    def __len__(self) -> int:
        return len(self._handles)

    def _set_status(self, request_id: str, status: WorkflowStatus, error: str | None = None) -> Optional[WorkflowHandle]:
        handle = self._handles.get(request_id)
        if handle is None:
            return None
        handle.status = status
        if error is not None:
            handle.error = error
        return handle

    def mark_delivered(self, request_id: str) -> Optional[WorkflowHandle]:
        return self._set_status(request_id, WorkflowStatus.DELIVERED)

    def mark_failed(self, request_id: str, error: str) -> Optional[WorkflowHandle]:
        return self._set_status(request_id, WorkflowStatus.FAILED, error)

    def mark_timed_out(self, request_id: str) -> Optional[WorkflowHandle]:
        return self._set_status(request_id, WorkflowStatus.TIMED_OUT)

    def clear(self) -> None:
        self._handles.clear()


_tracker: Optional[WorkflowTracker] = None


def get_workflow_tracker() -> WorkflowTracker:
    global _tracker
    if _tracker is None:
        from cryptoverifier.config import get_settings
        _tracker = WorkflowTracker(limit=get_settings().tracked_workflow_limit)
    return _tracker
