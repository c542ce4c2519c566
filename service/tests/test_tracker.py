"""
Tests for the in-memory workflow registry.
"""

from cryptoverifier.agents.schemas import ContentCategory, WorkflowHandle, WorkflowStatus
from cryptoverifier.services.tracker import WorkflowTracker, get_workflow_tracker


def _handle(request_id: str, chat_id: int = 1) -> WorkflowHandle:
    return WorkflowHandle(request_id=request_id, chat_id=chat_id, category=ContentCategory.URL)


class TestWorkflowTracker:
    def test_register_and_get(self):
        tracker = WorkflowTracker()
        handle = tracker.register(_handle("AAAAA"))
        assert tracker.get("AAAAA") is handle
        assert tracker.get("BBBBB") is None

    def test_bounded_at_write_time(self):
        tracker = WorkflowTracker(limit=3)
        for i in range(10_000):
            tracker.register(_handle(f"R{i:05d}"))

        assert len(tracker) == 3
        assert tracker.get("R00000") is None
        assert [tracker.get(f"R{i:05d}") is not None for i in (9997, 9998, 9999)] == [True, True, True]

    def test_reregister_refreshes_position(self):
        tracker = WorkflowTracker(limit=2)
        tracker.register(_handle("AAAAA"))
        tracker.register(_handle("BBBBB"))
        tracker.register(_handle("AAAAA"))
        tracker.register(_handle("CCCCC"))

        assert tracker.get("AAAAA") is not None
        assert tracker.get("BBBBB") is None

    def test_status_transitions(self):
        tracker = WorkflowTracker()
        tracker.register(_handle("AAAAA"))

        tracker.mark_failed("AAAAA", "Status 500: boom")
        handle = tracker.get("AAAAA")
        assert handle.status == WorkflowStatus.FAILED
        assert handle.error == "Status 500: boom"

        assert tracker.mark_delivered("ZZZZZ") is None

    def test_singleton_uses_configured_limit(self):
        assert get_workflow_tracker().limit == 1000
