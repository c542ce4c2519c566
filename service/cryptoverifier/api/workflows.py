from fastapi import APIRouter, HTTPException

from cryptoverifier.agents.schemas import WorkflowHandle
from cryptoverifier.services.tracker import get_workflow_tracker

router = APIRouter(prefix="/workflows", tags=["workflows"])


@router.get("/{request_id}", response_model=WorkflowHandle)
async def get_workflow_status(request_id: str) -> WorkflowHandle:
    """Status of a submitted analysis: submitted, delivered, failed or timed_out."""
    handle = get_workflow_tracker().get(request_id.upper())
    if handle is None:
        raise HTTPException(status_code=404, detail="Unknown request id")
    return handle
