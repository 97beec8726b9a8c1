from __future__ import annotations

import logging
from typing import Any

import pytest
from conftest import make_response

from mcp_servers.browser_ai.errors import HttpError, NetworkError, RequestFailed, TaskFailed, TransportError
from mcp_servers.browser_ai.server.instrumentation import ToolCallStats, create_tool_fn
from mcp_servers.browser_ai.server.types import ToolContext
from mcp_servers.browser_ai.sessions import SessionRegistry
from mcp_servers.browser_ai.tasks import TaskContext

LOGGER = "test.instrumentation"


@pytest.fixture()
def ctx(api_config) -> ToolContext:  # noqa: ANN001
    return ToolContext(
        config=api_config,
        client=None,  # type: ignore[arg-type]
        sessions=SessionRegistry(),
        stats=ToolCallStats(),
        task=TaskContext(log=logging.getLogger(LOGGER)),
    )


def _finished(caplog: pytest.LogCaptureFixture) -> list[logging.LogRecord]:
    return [r for r in caplog.records if "tool finished" in r.getMessage()]


def test_success_returns_result_unchanged_and_counts(ctx: ToolContext, caplog: pytest.LogCaptureFixture) -> None:
    stats = ToolCallStats()
    tool_fn = create_tool_fn(stats)
    seen: list[Any] = []

    def impl(args: dict[str, Any], c: ToolContext) -> str:
        seen.append((args, c))
        return '{"ok": true}'

    wrapped = tool_fn("demo", impl)
    with caplog.at_level(logging.INFO, logger=LOGGER):
        assert wrapped({"a": 1}, ctx) == '{"ok": true}'
        assert wrapped({"a": 2}, ctx) == '{"ok": true}'

    assert seen == [({"a": 1}, ctx), ({"a": 2}, ctx)]
    assert stats.get("demo") == 2
    assert stats.snapshot() == {"demo": 2}
    assert len(_finished(caplog)) == 2


def test_http_error_with_empty_body_uses_status_text(ctx: ToolContext, caplog: pytest.LogCaptureFixture) -> None:
    response = make_response(raw=b"", status=404, status_text="Not Found")

    def impl(args: dict[str, Any], c: ToolContext) -> str:
        raise HttpError("boom", response=response)

    wrapped = create_tool_fn(ToolCallStats())("status", impl)
    with caplog.at_level(logging.INFO, logger=LOGGER), pytest.raises(HttpError) as exc:
        wrapped({}, ctx)

    assert "404" in str(exc.value)
    assert str(exc.value) == "HTTP 404: Not Found"
    assert exc.value.response is response
    assert len(_finished(caplog)) == 1


def test_http_error_without_body_or_status_text_falls_back(ctx: ToolContext) -> None:
    response = make_response(raw=b"", status=404, status_text="")

    def impl(args: dict[str, Any], c: ToolContext) -> str:
        raise HttpError("boom", response=response)

    with pytest.raises(HttpError) as exc:
        create_tool_fn(ToolCallStats())("status", impl)({}, ctx)
    assert str(exc.value) == "HTTP 404: Unknown HTTP error"


def test_http_error_prefers_body_text(ctx: ToolContext) -> None:
    response = make_response(raw=b'{"error": "quota exceeded"}', status=429, status_text="Too Many Requests")

    def impl(args: dict[str, Any], c: ToolContext) -> str:
        raise HttpError("boom", response=response)

    with pytest.raises(HttpError) as exc:
        create_tool_fn(ToolCallStats())("x", impl)({}, ctx)
    assert str(exc.value) == 'HTTP 429: {"error": "quota exceeded"}'
    assert isinstance(exc.value.__cause__, HttpError)


def test_request_failed_keeps_its_message(ctx: ToolContext) -> None:
    response = make_response(raw=b"oops", status=500, status_text="Internal Server Error")
    failure = RequestFailed("Failed to send instructions: 500 Internal Server Error - oops", response=response)

    def impl(args: dict[str, Any], c: ToolContext) -> str:
        raise failure

    with pytest.raises(RequestFailed) as exc:
        create_tool_fn(ToolCallStats())("x", impl)({}, ctx)
    assert exc.value is failure
    assert str(exc.value) == "Failed to send instructions: 500 Internal Server Error - oops"


def test_unreadable_body_does_not_mask_http_error(ctx: ToolContext, caplog: pytest.LogCaptureFixture) -> None:
    class BrokenResponse:
        status = 502
        status_text = "Bad Gateway"

        def text(self) -> str:
            raise OSError("stream closed")

    def impl(args: dict[str, Any], c: ToolContext) -> str:
        raise HttpError("boom", response=BrokenResponse())  # type: ignore[arg-type]

    with caplog.at_level(logging.INFO, logger=LOGGER), pytest.raises(HttpError) as exc:
        create_tool_fn(ToolCallStats())("x", impl)({}, ctx)

    assert str(exc.value) == "HTTP 502: Bad Gateway"
    assert any("failed to read error response text" in r.getMessage() for r in caplog.records)


def test_transport_error_becomes_network_error(ctx: ToolContext) -> None:
    def impl(args: dict[str, Any], c: ToolContext) -> str:
        raise TransportError("GET https://api.test/v1/tasks/1: Connection refused")

    with pytest.raises(NetworkError) as exc:
        create_tool_fn(ToolCallStats())("x", impl)({}, ctx)
    assert str(exc.value) == "Network error: GET https://api.test/v1/tasks/1: Connection refused"


def test_other_errors_pass_through_unchanged(ctx: ToolContext, caplog: pytest.LogCaptureFixture) -> None:
    original = TaskFailed("t2", "blocked")

    def impl(args: dict[str, Any], c: ToolContext) -> str:
        raise original

    with caplog.at_level(logging.INFO, logger=LOGGER), pytest.raises(TaskFailed) as exc:
        create_tool_fn(ToolCallStats())("x", impl)({}, ctx)
    assert exc.value is original
    assert len(_finished(caplog)) == 1

    bug = ValueError("unexpected")

    def impl_bug(args: dict[str, Any], c: ToolContext) -> str:
        raise bug

    caplog.clear()
    with caplog.at_level(logging.INFO, logger=LOGGER), pytest.raises(ValueError) as exc_bug:
        create_tool_fn(ToolCallStats())("x", impl_bug)({}, ctx)
    assert exc_bug.value is bug
    assert any("unexpected_error" in r.getMessage() for r in caplog.records)
    assert len(_finished(caplog)) == 1


def test_arguments_are_redacted_in_logs(ctx: ToolContext, caplog: pytest.LogCaptureFixture) -> None:
    wrapped = create_tool_fn(ToolCallStats())("interact", lambda args, c: "{}")
    with caplog.at_level(logging.INFO, logger=LOGGER):
        wrapped({"instructions": ["Fill password with hunter2", "Click login"], "executionId": "e"}, ctx)
    text = "\n".join(r.getMessage() for r in caplog.records)
    assert "hunter2" not in text
    assert "Click login" in text
