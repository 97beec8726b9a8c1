"""Submitting instruction batches to the task API.

Both entry points end in the task poller and return the compatibility
payload: a JSON text object `{"executionId": ..., "result": ...}`.
"""

from __future__ import annotations

import json
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from .errors import MissingIdentifier, RequestFailed
from .http_client import api_path
from .tasks import POLL_INTERVAL, TaskContext, poll_task_result

if TYPE_CHECKING:
    from .http_client import ApiClient, ApiResponse
    from .sessions import SessionRegistry

SETTLE_DELAY = 1.0
DEFAULT_GEO_LOCATION: dict[str, str] = {"country": "US"}

Instruction = dict[str, str]


def actions(texts: list[str]) -> list[Instruction]:
    return [{"action": text} for text in texts]


def build_task_body(
    instructions: list[Instruction],
    project_name: str,
    geo_location: dict[str, Any] | None = None,
) -> dict[str, Any]:
    return {
        "geoLocation": geo_location or dict(DEFAULT_GEO_LOCATION),
        "awaitable": True,
        "instructions": instructions,
        "project": project_name,
        "type": "natural_language",
    }


def _fail(what: str, response: ApiResponse, ctx: TaskContext) -> RequestFailed:
    error_text = response.text()
    ctx.log.error(
        "%s status=%s status_text=%s error=%s", what, response.status, response.status_text, error_text
    )
    return RequestFailed(
        f"{what}: {response.status} {response.status_text} - {error_text}",
        response=response,
    )


def _result_payload(task_id: str, result: Any) -> str:
    return json.dumps({"executionId": task_id, "result": result})


def start_task(
    client: ApiClient,
    instructions: list[Instruction],
    project_name: str,
    ctx: TaskContext | None = None,
    *,
    geo_location: dict[str, Any] | None = None,
    sessions: SessionRegistry | None = None,
    poll_interval: float = POLL_INTERVAL,
    sleep: Callable[[float], None] | None = None,
) -> str:
    """Create a new task (browser session) and wait for its first result."""
    ctx = ctx or TaskContext()
    body = build_task_body(instructions, project_name, geo_location)
    ctx.log.info("task_create url=%s instructions=%d", client.url("tasks"), len(instructions))
    response = client.post("tasks", body)
    if not response.ok:
        raise _fail("Failed to start new session", response, ctx)

    data = response.json()
    task_id = data.get("executionId") if isinstance(data, dict) else None
    ctx.log.info("task_created task_id=%s", task_id)
    if not task_id:
        raise MissingIdentifier("No execution ID received from API")

    if sessions is not None:
        sessions.track(task_id)
    result = poll_task_result(client, task_id, ctx, interval=poll_interval, sleep=sleep)
    return _result_payload(task_id, result)


def send_session_instructions(
    client: ApiClient,
    execution_id: str,
    instructions: list[Instruction],
    project_name: str,
    ctx: TaskContext | None = None,
    *,
    settle_delay: float = SETTLE_DELAY,
    poll_interval: float = POLL_INTERVAL,
    sleep: Callable[[float], None] | None = None,
) -> str:
    """Send more instructions to an existing session and wait for the result."""
    ctx = ctx or TaskContext()
    path = api_path("tasks", execution_id, "instructions")
    body = build_task_body(instructions, project_name)
    ctx.log.info(
        "session_instructions url=%s execution_id=%s instructions=%d",
        client.url(path),
        execution_id,
        len(instructions),
    )
    response = client.post(path, body)
    if not response.ok:
        raise _fail("Failed to send instructions", response, ctx)

    data = response.json()
    task_id = data.get("executionId") if isinstance(data, dict) else None

    # The new task is not pollable right away.
    if sleep is not None:
        sleep(settle_delay)
    elif ctx.cancel is not None:
        ctx.cancel.wait(settle_delay)
    else:
        time.sleep(settle_delay)
    ctx.log.info("session_instructions_accepted task_id=%s", task_id)
    if not task_id:
        ctx.log.error("session_instructions_missing_id response=%s", data)
        raise MissingIdentifier("No task ID received from API after sending instructions")

    result = poll_task_result(client, task_id, ctx, interval=poll_interval, sleep=sleep)
    return _result_payload(task_id, result)


__all__ = [
    "DEFAULT_GEO_LOCATION",
    "SETTLE_DELAY",
    "Instruction",
    "actions",
    "build_task_body",
    "send_session_instructions",
    "start_task",
]
