"""Task status polling.

A submitted task is polled with GET /tasks/{id} until it reaches a terminal
status. `TaskPoller.step()` performs exactly one poll so callers (and tests)
can drive the state machine by hand; `run()` loops it with a fixed delay.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from contextlib import suppress
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from .errors import ParseError, TaskCancelled, TaskFailed, TaskTimeout
from .http_client import api_path

if TYPE_CHECKING:
    from .http_client import ApiClient

logger = logging.getLogger("mcp.browser_ai.tasks")

POLL_INTERVAL = 3.0
PROGRESS_TOTAL = 20

SUCCESS_STATUSES = frozenset({"finalized", "awaiting"})
FAILURE_STATUS = "failed"
RUNNING_STATUSES = frozenset({"pending", "in_progress", "running", "queued", "created"})

ProgressSink = Callable[[int, int], None]
Logger = logging.Logger | logging.LoggerAdapter


class TaskState(str, Enum):
    SUBMITTED = "submitted"
    POLLING = "polling"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class TaskContext:
    """Per-call sinks and limits shared by the poller and the dispatcher."""

    log: Logger = logger
    report_progress: ProgressSink | None = None
    cancel: threading.Event | None = None
    deadline: float | None = None  # time.monotonic() based


class TaskPoller:
    def __init__(
        self,
        client: ApiClient,
        task_id: str,
        ctx: TaskContext | None = None,
        *,
        interval: float = POLL_INTERVAL,
        total: int = PROGRESS_TOTAL,
        sleep: Callable[[float], None] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.task_id = task_id
        self.state = TaskState.SUBMITTED
        self.result: Any = None
        self.error: str | None = None
        self.iterations = 0
        self.interval = interval
        self.total = total
        self._client = client
        self._ctx = ctx or TaskContext()
        self._sleep = sleep or self._wait
        self._clock = clock
        self._started = clock()
        self._unknown_seen: set[str] = set()

    @property
    def log(self) -> Logger:
        return self._ctx.log

    @property
    def done(self) -> bool:
        return self.state in (TaskState.SUCCEEDED, TaskState.FAILED)

    def step(self) -> TaskState:
        """Issue one status request and advance the state machine."""
        if self.done:
            return self.state
        self._check_abort()
        self.state = TaskState.POLLING

        response = self._client.get(api_path("tasks", self.task_id))
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict) or "status" not in data:
            raise ParseError(f"Task {self.task_id}: status response is not a status object")

        status = data.get("status")
        if not isinstance(status, str):
            raise ParseError(f"Task {self.task_id}: status must be a string, got {type(status).__name__}")
        self.log.info("task_poll_status task_id=%s status=%s", self.task_id, status)
        self._report_progress()
        self.iterations += 1

        if status in SUCCESS_STATUSES:
            self.result = data.get("result")
            self.state = TaskState.SUCCEEDED
            self.log.info("task_%s task_id=%s result=%s", status, self.task_id, _brief(self.result))
        elif status == FAILURE_STATUS:
            self.error = data.get("error")
            self.state = TaskState.FAILED
            self.log.error("task_poll_failed task_id=%s error=%s", self.task_id, self.error)
            raise TaskFailed(self.task_id, self.error)
        elif status not in RUNNING_STATUSES and status not in self._unknown_seen:
            self._unknown_seen.add(status)
            self.log.warning("task_unknown_status task_id=%s status=%r (still polling)", self.task_id, status)
        return self.state

    def run(self) -> Any:
        """Poll until terminal; returns the task result or raises TaskFailed."""
        while self.step() is not TaskState.SUCCEEDED:
            self._sleep(self._bounded(self.interval))
            self._check_abort()
        return self.result

    def _report_progress(self) -> None:
        sink = self._ctx.report_progress
        if sink is None:
            return
        try:
            sink(self.iterations, self.total)
        except Exception as exc:  # noqa: BLE001
            self.log.debug("progress_report_failed task_id=%s error=%s", self.task_id, exc)

    def _bounded(self, delay: float) -> float:
        deadline = self._ctx.deadline
        if deadline is None:
            return delay
        return max(0.0, min(delay, deadline - self._clock()))

    def _wait(self, delay: float) -> None:
        cancel = self._ctx.cancel
        if cancel is not None:
            cancel.wait(delay)
        else:
            time.sleep(delay)

    def _check_abort(self) -> None:
        cancel = self._ctx.cancel
        if cancel is not None and cancel.is_set():
            raise TaskCancelled(self.task_id)
        deadline = self._ctx.deadline
        if deadline is not None and self._clock() >= deadline:
            raise TaskTimeout(self.task_id, self._clock() - self._started)


def poll_task_result(client: ApiClient, task_id: str, ctx: TaskContext | None = None, **kwargs: Any) -> Any:
    return TaskPoller(client, task_id, ctx, **kwargs).run()


def _brief(value: Any, limit: int = 300) -> str:
    text = ""
    with suppress(Exception):
        text = repr(value)
    return text if len(text) <= limit else text[:limit] + "…"


__all__ = [
    "POLL_INTERVAL",
    "PROGRESS_TOTAL",
    "TaskContext",
    "TaskPoller",
    "TaskState",
    "poll_task_result",
]
