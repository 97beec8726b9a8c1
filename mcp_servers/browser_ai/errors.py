"""Error taxonomy for the BrowserAI adapter.

Each failure is tagged where it happens (client, poller, dispatcher) so the
tool wrapper can classify by type instead of sniffing attributes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .http_client import ApiResponse


class ApiError(Exception):
    pass


class ConfigurationError(ApiError):
    pass


class TransportError(ApiError):
    """Network-layer failure reaching the remote service."""


class NetworkError(TransportError):
    pass


class HttpError(ApiError):
    """Remote service answered with a non-success status."""

    def __init__(self, message: str, *, response: ApiResponse | None = None) -> None:
        super().__init__(message)
        self.response = response

    @property
    def status(self) -> int | None:
        return self.response.status if self.response is not None else None


class RequestFailed(HttpError):
    """A request this adapter issued was refused; the message already names it."""


class ParseError(ApiError):
    pass


class MissingIdentifier(ApiError):
    pass


class InvalidArguments(ApiError):
    pass


class TaskFailed(ApiError):
    def __init__(self, task_id: str, error: str | None) -> None:
        super().__init__(f"Task {task_id} failed: {error}")
        self.task_id = task_id
        self.error = error


class TaskCancelled(ApiError):
    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task {task_id} polling cancelled")
        self.task_id = task_id


class TaskTimeout(ApiError):
    def __init__(self, task_id: str, elapsed: float) -> None:
        super().__init__(f"Task {task_id} did not finish within {elapsed:.1f}s")
        self.task_id = task_id
        self.elapsed = elapsed


__all__ = [
    "ApiError",
    "ConfigurationError",
    "HttpError",
    "InvalidArguments",
    "MissingIdentifier",
    "NetworkError",
    "ParseError",
    "RequestFailed",
    "TaskCancelled",
    "TaskFailed",
    "TaskTimeout",
    "TransportError",
]
