from __future__ import annotations

import json
from typing import Any

import pytest

from mcp_servers.browser_ai.config import ApiConfig
from mcp_servers.browser_ai.http_client import ApiResponse


def make_response(body: Any = None, *, status: int = 200, status_text: str = "OK", raw: bytes | None = None) -> ApiResponse:
    payload = raw if raw is not None else json.dumps(body).encode()
    return ApiResponse(status=status, status_text=status_text, body=payload, url="https://api.test/v1")


class FakeClient:
    """Scripted stand-in for ApiClient.

    Each (method, path) route holds a queue of responses/exceptions; the last
    item repeats once the queue is drained.
    """

    base_url = "https://api.test/v1"

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, Any]] = []
        self._routes: dict[tuple[str, str], list[Any]] = {}

    def on(self, method: str, path: str, *items: Any) -> FakeClient:
        self._routes.setdefault((method, path), []).extend(items)
        return self

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path}"

    def get(self, path: str) -> ApiResponse:
        return self._next("GET", path, None)

    def post(self, path: str, body: dict[str, Any]) -> ApiResponse:
        return self._next("POST", path, body)

    def count(self, method: str, path: str) -> int:
        return sum(1 for m, p, _ in self.calls if m == method and p == path)

    def _next(self, method: str, path: str, body: Any) -> ApiResponse:
        self.calls.append((method, path, body))
        queue = self._routes.get((method, path))
        if not queue:
            raise AssertionError(f"unexpected request {method} {path}")
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, BaseException):
            raise item
        return item


class RecordingSleep:
    def __init__(self, events: list[Any] | None = None) -> None:
        self.delays: list[float] = []
        self.events = events

    def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        if self.events is not None:
            self.events.append(("sleep", delay))


@pytest.fixture()
def fake_client() -> FakeClient:
    return FakeClient()


@pytest.fixture()
def api_config() -> ApiConfig:
    return ApiConfig(api_token="tok", project_name="proj", api_url="https://api.test/v1")
