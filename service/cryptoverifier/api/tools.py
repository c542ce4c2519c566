"""
Capability endpoint called by the OpenServ platform.

The platform invokes POST /tools/{tool_name} with {"args": ..., "action": ...}
when one of our agent's tasks decides to use a capability.
"""

from fastapi import APIRouter, Header, HTTPException
from pydantic import ValidationError

from cryptoverifier.agents.prompts import SEND_TOOL_NAME
from cryptoverifier.agents.schemas import SendTelegramMessageArgs, ToolCallRequest, ToolCallResponse
from cryptoverifier.config import get_settings
from cryptoverifier.logging_config import get_logger
from cryptoverifier.services import delivery

logger = get_logger("tools")

router = APIRouter(prefix="/tools", tags=["tools"])


@router.post("/{tool_name}", response_model=ToolCallResponse)
async def call_tool(
    tool_name: str,
    request: ToolCallRequest,
    x_tools_secret: str = Header(None),
) -> ToolCallResponse:
    settings = get_settings()

    # Verify shared secret if configured
    if settings.tools_secret:
        if x_tools_secret != settings.tools_secret:
            raise HTTPException(status_code=403, detail="Invalid tools secret")

    if tool_name != SEND_TOOL_NAME:
        raise HTTPException(status_code=404, detail=f"Unknown tool: {tool_name}")

    try:
        args = SendTelegramMessageArgs(**request.args)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False))

    logger.info(f"Capability {tool_name} called (content_len={len(args.content)})")
    result = await delivery.send_telegram_message(args, request.action)
    return ToolCallResponse(result=result)
