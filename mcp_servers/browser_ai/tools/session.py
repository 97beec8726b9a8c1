"""
Browser session operations on top of the task API.

A "session" is a task whose executionId is reused across instruction
batches so the remote browser keeps its state between tool calls.
"""

from __future__ import annotations

import json
import time
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from ..errors import RequestFailed
from ..http_client import api_path
from ..instructions import Instruction, actions, send_session_instructions, start_task
from . import prompts

if TYPE_CHECKING:
    from ..server.types import ToolContext


def _send(ctx: ToolContext, execution_id: str, payload: list[Instruction]) -> str:
    return send_session_instructions(
        ctx.client,
        execution_id,
        payload,
        ctx.config.project_name,
        ctx.task,
        settle_delay=ctx.config.settle_delay,
        poll_interval=ctx.config.poll_interval,
        sleep=ctx.sleep,
    )


def start_new_session(
    ctx: ToolContext,
    instruction: str,
    *,
    geo_location: dict[str, Any] | None = None,
    extract_data: bool = True,
) -> str:
    ctx.log.info(
        "start_new_session instruction=%r geo_location=%s extract_data=%s", instruction, geo_location, extract_data
    )
    payload = actions([instruction])
    if extract_data:
        payload.append({"action": prompts.extract_page_elements()})
    return start_task(
        ctx.client,
        payload,
        ctx.config.project_name,
        ctx.task,
        geo_location=geo_location,
        sessions=ctx.sessions,
        poll_interval=ctx.config.poll_interval,
        sleep=ctx.sleep,
    )


def interact_and_extract(
    ctx: ToolContext,
    execution_id: str,
    instructions: list[str],
    *,
    extract_data: bool = True,
    wait_time: float = 2,
) -> str:
    payload = actions(instructions)
    if wait_time > 0:
        payload.append({"action": prompts.wait_after_interaction(wait_time)})
    if extract_data:
        payload.append({"action": prompts.extract_after_actions()})
    ctx.sessions.touch(execution_id)
    return _send(ctx, execution_id, payload)


def extract_from_session(ctx: ToolContext, execution_id: str, instructions: list[str]) -> str:
    payload = actions(instructions)
    payload.append({"action": prompts.CLEAN_JSON_RESULT})
    ctx.sessions.touch(execution_id)
    return _send(ctx, execution_id, payload)


def get_session_status(ctx: ToolContext, execution_id: str) -> str:
    """Single status read; unlike polling this never waits."""
    response = ctx.client.get(api_path("tasks", execution_id))
    if not response.ok:
        error_text = response.text()
        ctx.log.error(
            "get_session_status_failed status=%s status_text=%s error=%s",
            response.status,
            response.status_text,
            error_text,
        )
        raise RequestFailed(
            f"Failed to get session status: {response.status} {response.status_text} - {error_text}",
            response=response,
        )
    return json.dumps(response.json())


def wait_for_element(ctx: ToolContext, execution_id: str, instruction: str, *, timeout: float = 30) -> str:
    payload = [
        {"action": prompts.wait_for_element(instruction, timeout)},
        {"action": prompts.extract_when_found()},
    ]
    return _send(ctx, execution_id, payload)


def navigate_to_url(ctx: ToolContext, execution_id: str, url: str) -> str:
    payload = [
        {"action": prompts.navigate(url)},
        {"action": prompts.extract_after_navigation()},
    ]
    return _send(ctx, execution_id, payload)


def get_page_info(ctx: ToolContext, execution_id: str) -> str:
    payload = [{"action": prompts.PAGE_INFO}, {"action": prompts.PAGE_INFO_FORMAT}]
    return _send(ctx, execution_id, payload)


def batch_actions(
    ctx: ToolContext,
    execution_id: str,
    steps: list[str],
    *,
    stop_on_error: bool = True,
    delay_between_actions: float = 1,
) -> str:
    # The remote agent runs the batch sequentially and fails the task on the
    # first failed step; stop_on_error is accepted for client compatibility.
    ctx.log.info(
        "batch_actions count=%d execution_id=%s stop_on_error=%s delay=%s",
        len(steps),
        execution_id,
        stop_on_error,
        delay_between_actions,
    )
    payload: list[Instruction] = []
    for index, step in enumerate(steps):
        payload.append({"action": step})
        if index < len(steps) - 1 and delay_between_actions > 0:
            payload.append({"action": prompts.wait_between_actions(delay_between_actions)})
    payload.append({"action": prompts.extract_after_batch(len(steps))})
    return _send(ctx, execution_id, payload)


def _iso(ts: float) -> str:
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def list_active_sessions(ctx: ToolContext, *, now: float | None = None) -> str:
    now = time.time() if now is None else now
    sessions = [
        {
            "executionId": session_id,
            "created": _iso(record.created),
            "lastActivity": _iso(record.last_activity),
            "ageMinutes": round((now - record.created) / 60),
        }
        for session_id, record in ctx.sessions.list()
    ]
    return json.dumps({"activeSessions": sessions, "totalSessions": len(sessions), "timestamp": _iso(now)})


def debug_stats(ctx: ToolContext) -> str:
    return json.dumps({"toolCalls": ctx.stats.snapshot(), "totalSessions": len(ctx.sessions)})


__all__ = [
    "batch_actions",
    "debug_stats",
    "extract_from_session",
    "get_page_info",
    "get_session_status",
    "interact_and_extract",
    "list_active_sessions",
    "navigate_to_url",
    "start_new_session",
    "wait_for_element",
]
