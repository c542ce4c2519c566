"""
Analysis workflows on the OpenServ platform.

Each content category maps to a fixed, layered DAG of five remote tasks:

    URL:     search -> {content, research} -> report -> deliver
    TOKEN:   scan -> {reputation, research} -> report -> deliver
    MESSAGE: extract -> {analysis, url_research} -> report -> deliver

Tasks reference each other's output by artifact name
({requestId}_{STAGE}_{KIND}) and by remote task id (dependencies). The
platform schedules and runs them; we only create them, in order.

Submission is fire-and-forget: start_analysis() returns a WorkflowHandle as
soon as the tasks exist. The report arrives later through the
sendTelegramMessage capability (see services/delivery.py). The destination
chat and request id travel inside every task's input, so no shared
"current chat" state is involved.

Failure policy: the first task-creation error aborts the rest of the graph.
Tasks already created stay queued remotely (no cleanup, no retry) and the
user gets exactly one error message.
"""

import asyncio
import json
import uuid
from typing import Any, Awaitable, Callable, Optional

import httpx

from cryptoverifier.agents import prompts
from cryptoverifier.agents.schemas import (
    AnalysisRequest,
    ContentCategory,
    WorkflowHandle,
    WorkflowStatus,
    WorkflowTask,
)
from cryptoverifier.config import AgentIds, Settings, get_settings
from cryptoverifier.logging_config import get_logger
from cryptoverifier.services.openserv_client import OpenServClient, get_openserv_client
from cryptoverifier.services.tracker import WorkflowTracker, get_workflow_tracker
from cryptoverifier.telegram_bot.telegram_api import notify_chat
from cryptoverifier.utils.validators import classify_content

logger = get_logger("workflow")

Notifier = Callable[[int, str], Awaitable[Any]]

CATEGORY_LABELS = {
    ContentCategory.URL: "URL",
    ContentCategory.TOKEN: "token",
    ContentCategory.MESSAGE: "message",
}

# Keep references to background watchers so they are not garbage collected
_background_tasks: set[asyncio.Task] = set()


class WorkflowSubmissionError(Exception):
    """Task creation failed; the remaining stages were not submitted."""

    def __init__(self, stage: str, detail: str, created: dict[str, Any]):
        super().__init__(f"Failed to create task '{stage}': {detail}")
        self.stage = stage
        self.detail = detail
        self.created = created


def new_request_id() -> str:
    """Short id shown to users and used as artifact prefix, e.g. "3F9A1"."""
    return uuid.uuid4().hex[:5].upper()


def create_analysis_request(
    content: str,
    chat_id: int,
    context_note: Optional[str] = None,
    category: Optional[ContentCategory] = None,
) -> AnalysisRequest:
    """Classify content (unless a category is forced) and assign a request id."""
    return AnalysisRequest(
        id=new_request_id(),
        category=category or classify_content(content),
        content=content,
        chat_id=chat_id,
        context_note=context_note,
    )


def _task_input(request: AnalysisRequest, **fields: Any) -> str:
    """Task input payload; always carries the destination chat and request id."""
    return json.dumps({**fields, "request_id": request.id, "chat_id": request.chat_id})


def _delivery_task(request: AnalysisRequest, agents: AgentIds, subject: str, report_file: str) -> WorkflowTask:
    label = CATEGORY_LABELS[request.category]
    return WorkflowTask(
        key="deliver",
        description=f"Send {label} security report to Telegram",
        body=prompts.delivery_body(subject, report_file, request.chat_id, request.id),
        assignee=agents.coordinator,
        input=_task_input(request, report=report_file),
        expected_output="Confirmation of report sent to Telegram user",
        dependencies=["report"],
    )


# =============================================================================
# GRAPH CONSTRUCTION
# =============================================================================

def build_url_workflow(request: AnalysisRequest, agents: AgentIds) -> list[WorkflowTask]:
    url = request.content
    search_file = prompts.artifact_name(request.id, "URL", "SEARCH_DATA.json")
    content_file = prompts.artifact_name(request.id, "URL", "CONTENT_DATA.json")
    research_file = prompts.artifact_name(request.id, "URL", "DEEP_RESEARCH.json")
    report_file = prompts.artifact_name(request.id, "URL", "REPORT.md")
    files = [search_file, content_file, research_file]

    return [
        WorkflowTask(
            key="search",
            description=f"Research if {url} is a scam, phishing site, or has been reported",
            body=prompts.url_search_body(url),
            assignee=agents.web_search,
            input=_task_input(request, query=f"{url} crypto scam phishing"),
            expected_output=f"Research results about {url} safety, saved as {search_file}",
        ),
        WorkflowTask(
            key="content",
            description=f"Safely read the content of {url} for analysis",
            body=prompts.url_content_body(url),
            assignee=agents.content_reader,
            input=_task_input(request, url=url),
            expected_output=f"Content of {url} saved as {content_file}",
            dependencies=["search"],
        ),
        WorkflowTask(
            key="research",
            description=f"Perform deep research on {url} for security analysis",
            body=prompts.url_research_body(url),
            assignee=agents.deep_research,
            input=_task_input(request, url=url),
            expected_output=f"Comprehensive research on {url} safety, saved as {research_file}",
            dependencies=["search"],
        ),
        WorkflowTask(
            key="report",
            description=f"Generate a security report for {url}",
            body=prompts.url_report_body(url, files),
            assignee=agents.report_writer,
            input=_task_input(request, files=files),
            expected_output=f"Security report for {url} saved as {report_file}",
            dependencies=["content", "research"],
        ),
        _delivery_task(request, agents, url, report_file),
    ]


def build_token_workflow(request: AnalysisRequest, agents: AgentIds) -> list[WorkflowTask]:
    address, chain = request.content, request.chain
    data_file = prompts.artifact_name(request.id, "TOKEN", "DATA.json")
    reputation_file = prompts.artifact_name(request.id, "TOKEN", "REPUTATION.json")
    research_file = prompts.artifact_name(request.id, "TOKEN", "DEEP_RESEARCH.json")
    report_file = prompts.artifact_name(request.id, "TOKEN", "REPORT.md")
    files = [data_file, reputation_file, research_file]

    return [
        WorkflowTask(
            key="scan",
            description=f"Analyze token contract {address} on {chain}",
            body=prompts.token_scan_body(address, chain),
            assignee=agents.contract_scanner,
            input=_task_input(request, address=address, chain=chain),
            expected_output=f"Token contract analysis saved as {data_file}",
        ),
        WorkflowTask(
            key="reputation",
            description=f"Research reputation of token {address}",
            body=prompts.token_reputation_body(address, chain),
            assignee=agents.web_search,
            input=_task_input(request, query=f"{address} {chain} token scam rugpull security"),
            expected_output=f"Token reputation research saved as {reputation_file}",
            dependencies=["scan"],
        ),
        WorkflowTask(
            key="research",
            description=f"Perform deep research on token {address}",
            body=prompts.token_research_body(address, chain),
            assignee=agents.deep_research,
            input=_task_input(request, query=f"{address} {chain} token contract analysis security"),
            expected_output=f"Comprehensive token research saved as {research_file}",
            dependencies=["scan"],
        ),
        WorkflowTask(
            key="report",
            description=f"Generate security report for token {address}",
            body=prompts.token_report_body(address, chain, files),
            assignee=agents.report_writer,
            input=_task_input(request, files=files),
            expected_output=f"Security report for token {address} saved as {report_file}",
            dependencies=["reputation", "research"],
        ),
        _delivery_task(request, agents, f"token {address}", report_file),
    ]


def build_message_workflow(request: AnalysisRequest, agents: AgentIds) -> list[WorkflowTask]:
    message, note = request.content, request.context_note
    urls_file = prompts.artifact_name(request.id, "MESSAGE", "URLS.json")
    analysis_file = prompts.artifact_name(request.id, "MESSAGE", "ANALYSIS.json")
    url_research_file = prompts.artifact_name(request.id, "MESSAGE", "URL_RESEARCH.json")
    report_file = prompts.artifact_name(request.id, "MESSAGE", "REPORT.md")
    files = [analysis_file, url_research_file]

    return [
        WorkflowTask(
            key="extract",
            description="Extract URLs from message for analysis",
            body=prompts.MESSAGE_EXTRACT_BODY,
            assignee=agents.json_analyzer,
            input=_task_input(request, message=message, context_info=note),
            expected_output=f"Extracted URLs saved as {urls_file}",
        ),
        WorkflowTask(
            key="analysis",
            description="Analyze message for scam and phishing indicators",
            body=prompts.message_analysis_body(message, note),
            assignee=agents.deep_research,
            input=_task_input(request, message=message, context_info=note),
            expected_output=f"Message analysis saved as {analysis_file}",
            dependencies=["extract"],
        ),
        WorkflowTask(
            key="url_research",
            description="Research any URLs found in the message",
            body=prompts.MESSAGE_URL_RESEARCH_BODY,
            assignee=agents.web_search,
            input=_task_input(request, file=urls_file),
            expected_output=f"URL research saved as {url_research_file}",
            dependencies=["extract"],
        ),
        WorkflowTask(
            key="report",
            description="Generate security report for message",
            body=prompts.message_report_body(files),
            assignee=agents.report_writer,
            input=_task_input(request, files=files),
            expected_output=f"Security report saved as {report_file}",
            dependencies=["analysis", "url_research"],
        ),
        _delivery_task(request, agents, "the message", report_file),
    ]


_BUILDERS = {
    ContentCategory.URL: build_url_workflow,
    ContentCategory.TOKEN: build_token_workflow,
    ContentCategory.MESSAGE: build_message_workflow,
}


def build_workflow(request: AnalysisRequest, agents: AgentIds) -> list[WorkflowTask]:
    return _BUILDERS[request.category](request, agents)


def validate_workflow(tasks: list[WorkflowTask]) -> None:
    """Dependencies may only point at tasks earlier in the list."""
    seen: set[str] = set()
    for task in tasks:
        if task.key in seen:
            raise ValueError(f"Duplicate task key: {task.key}")
        unknown = [dep for dep in task.dependencies if dep not in seen]
        if unknown:
            raise ValueError(f"Task '{task.key}' depends on tasks not created before it: {unknown}")
        seen.add(task.key)


# =============================================================================
# SUBMISSION
# =============================================================================

def describe_error(error: Exception) -> str:
    """Best diagnostic detail available from a failed platform call."""
    if isinstance(error, httpx.HTTPStatusError):
        return f"Status {error.response.status_code}: {error.response.text}"
    if isinstance(error, httpx.RequestError):
        return f"No response received ({error.__class__.__name__}: {error})"
    return str(error) or error.__class__.__name__


async def submit_workflow(
    tasks: list[WorkflowTask],
    client: OpenServClient,
    workspace_id: int,
) -> dict[str, Any]:
    """
    Create tasks in order, translating dependency keys to remote task ids.

    Returns stage key -> remote task id. Raises WorkflowSubmissionError on
    the first failure; later tasks are not attempted.
    """
    validate_workflow(tasks)
    created: dict[str, Any] = {}

    for index, task in enumerate(tasks, start=1):
        logger.debug(f"Creating task {index}/{len(tasks)} '{task.key}' (assignee={task.assignee})")
        try:
            result = await client.create_task(
                workspace_id=workspace_id,
                assignee=task.assignee,
                description=task.description,
                body=task.body,
                input=task.input,
                expected_output=task.expected_output,
                dependencies=[created[dep] for dep in task.dependencies],
            )
            created[task.key] = result["id"]
        except (httpx.HTTPError, KeyError, ValueError) as e:
            raise WorkflowSubmissionError(task.key, describe_error(e), dict(created)) from e

        logger.info(f"Task '{task.key}' created with ID: {created[task.key]}")

    return created


async def start_analysis(
    request: AnalysisRequest,
    *,
    client: Optional[OpenServClient] = None,
    settings: Optional[Settings] = None,
    tracker: Optional[WorkflowTracker] = None,
    notify: Optional[Notifier] = None,
) -> WorkflowHandle:
    """
    Build and submit the workflow for a classified request.

    Returns the handle as soon as submission finishes. On failure the handle
    is marked failed and the chat receives one error message.
    """
    settings = settings or get_settings()
    client = client or get_openserv_client()
    tracker = tracker or get_workflow_tracker()
    notify = notify or notify_chat
    label = CATEGORY_LABELS[request.category]

    logger.info(
        f"Starting {label} analysis workflow with request ID {request.id} "
        f"(chat_id={request.chat_id}, workspace_id={settings.workspace_id})"
    )

    handle = tracker.register(
        WorkflowHandle(request_id=request.id, chat_id=request.chat_id, category=request.category)
    )
    tasks = build_workflow(request, settings.agents)

    try:
        handle.task_ids = await submit_workflow(tasks, client, settings.workspace_id)
    except WorkflowSubmissionError as e:
        logger.error(f"Error creating {label} analysis workflow {request.id} at stage '{e.stage}': {e.detail}")
        handle.task_ids = e.created
        tracker.mark_failed(request.id, e.detail)
        await notify(request.chat_id, f"❌ Error analyzing {label}: {e.detail}")
        return handle

    logger.info(f"Workflow {request.id} submitted: {len(handle.task_ids)} tasks")
    return handle


# =============================================================================
# FOLLOW-UP
# =============================================================================

async def watch_workflow(
    handle: WorkflowHandle,
    *,
    followup_after: float,
    timeout: float,
    tracker: Optional[WorkflowTracker] = None,
    notify: Optional[Notifier] = None,
) -> WorkflowStatus:
    """
    Bounded wait for the report.

    Sends one "still processing" message after `followup_after` seconds and
    gives up (status timed_out) after `timeout` seconds. The remote tasks are
    not cancelled; a late report is still delivered.
    """
    tracker = tracker or get_workflow_tracker()
    notify = notify or notify_chat

    def pending() -> bool:
        current = tracker.get(handle.request_id) or handle
        return current.status == WorkflowStatus.SUBMITTED

    await asyncio.sleep(followup_after)
    if not pending():
        return handle.status

    await notify(
        handle.chat_id,
        f"⏳ Still processing your analysis (ID: {handle.request_id}). "
        "The report will be sent here as soon as it's ready."
    )

    await asyncio.sleep(max(timeout - followup_after, 0))
    if not pending():
        return handle.status

    tracker.mark_timed_out(handle.request_id)
    logger.warning(f"Workflow {handle.request_id} not delivered after {timeout}s")
    await notify(
        handle.chat_id,
        f"⌛ Analysis {handle.request_id} is taking longer than expected. "
        "The report may still arrive later, or you can run /check again."
    )
    return WorkflowStatus.TIMED_OUT


def schedule_watch(handle: WorkflowHandle, settings: Optional[Settings] = None) -> Optional[asyncio.Task]:
    """Run watch_workflow in the background for a successfully submitted handle."""
    if handle.status != WorkflowStatus.SUBMITTED:
        return None

    settings = settings or get_settings()
    task = asyncio.create_task(
        watch_workflow(
            handle,
            followup_after=settings.followup_after_seconds,
            timeout=settings.analysis_timeout_seconds,
        )
    )
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    return task
