from __future__ import annotations

import json
from typing import Any

import pytest
from conftest import FakeClient, RecordingSleep, make_response

from mcp_servers.browser_ai import tools as session_tools
from mcp_servers.browser_ai.errors import InvalidArguments, RequestFailed
from mcp_servers.browser_ai.server.handlers import ALL_HANDLERS
from mcp_servers.browser_ai.server.instrumentation import ToolCallStats
from mcp_servers.browser_ai.server.types import ToolContext
from mcp_servers.browser_ai.sessions import SessionRegistry


@pytest.fixture()
def ctx(api_config, fake_client: FakeClient) -> ToolContext:  # noqa: ANN001
    return ToolContext(
        config=api_config,
        client=fake_client,  # type: ignore[arg-type]
        sessions=SessionRegistry(),
        stats=ToolCallStats(),
        sleep=RecordingSleep(),
    )


def _script_session(client: FakeClient, execution_id: str = "sess", new_id: str = "run-1") -> None:
    client.on("POST", f"tasks/{execution_id}/instructions", make_response({"executionId": new_id}))
    client.on("GET", f"tasks/{new_id}", make_response({"status": "finalized", "result": {"ok": True}}))


def _sent_actions(client: FakeClient) -> list[str]:
    body: dict[str, Any] = next(c[2] for c in client.calls if c[0] == "POST")
    return [item["action"] for item in body["instructions"]]


def test_start_new_session_appends_extraction_and_tracks(ctx: ToolContext, fake_client: FakeClient) -> None:
    fake_client.on("POST", "tasks", make_response({"executionId": "sess"}))
    fake_client.on("GET", "tasks/sess", make_response({"status": "awaiting", "result": {"html_markup": "<html>"}}))

    out = session_tools.start_new_session(ctx, "Go to https://example.com")

    assert json.loads(out) == {"executionId": "sess", "result": {"html_markup": "<html>"}}
    sent = _sent_actions(fake_client)
    assert sent[0] == "Go to https://example.com"
    assert sent[1].startswith("Extract all clickable elements")
    assert "sess" in ctx.sessions
    assert fake_client.calls[0][2]["project"] == "proj"


def test_start_new_session_without_extraction(ctx: ToolContext, fake_client: FakeClient) -> None:
    fake_client.on("POST", "tasks", make_response({"executionId": "sess"}))
    fake_client.on("GET", "tasks/sess", make_response({"status": "finalized", "result": None}))
    session_tools.start_new_session(ctx, "Open example.com", extract_data=False)
    assert _sent_actions(fake_client) == ["Open example.com"]


def test_interact_adds_wait_and_extraction_and_touches(ctx: ToolContext, fake_client: FakeClient) -> None:
    ctx.sessions.track("sess")
    _script_session(fake_client)

    out = session_tools.interact_and_extract(ctx, "sess", ["Click login", "Scroll down"], wait_time=2)

    assert json.loads(out)["executionId"] == "run-1"
    sent = _sent_actions(fake_client)
    assert sent[:2] == ["Click login", "Scroll down"]
    assert sent[2] == "Wait 2 seconds for the page to update after the interaction"
    assert sent[3].startswith("After performing the actions, extract all clickable elements")


def test_interact_without_wait_or_extraction(ctx: ToolContext, fake_client: FakeClient) -> None:
    _script_session(fake_client)
    session_tools.interact_and_extract(ctx, "sess", ["Click"], extract_data=False, wait_time=0)
    assert _sent_actions(fake_client) == ["Click"]


def test_extract_from_session_appends_clean_json_instruction(ctx: ToolContext, fake_client: FakeClient) -> None:
    _script_session(fake_client)
    session_tools.extract_from_session(ctx, "sess", ["Extract all product names"])
    sent = _sent_actions(fake_client)
    assert sent[0] == "Extract all product names"
    assert sent[1].startswith("Return the extracted data as a clean JSON object.")


def test_batch_actions_interleaves_waits(ctx: ToolContext, fake_client: FakeClient) -> None:
    _script_session(fake_client)
    session_tools.batch_actions(ctx, "sess", ["Login", "Open settings", "Save"], delay_between_actions=1)
    sent = _sent_actions(fake_client)
    assert sent[:5] == [
        "Login",
        "Wait 1 seconds before next action",
        "Open settings",
        "Wait 1 seconds before next action",
        "Save",
    ]
    assert '"actions_completed": 3' in sent[5]


def test_navigate_and_wait_and_page_info_payloads(ctx: ToolContext, fake_client: FakeClient) -> None:
    _script_session(fake_client)
    session_tools.navigate_to_url(ctx, "sess", "https://example.com/a")
    assert _sent_actions(fake_client)[0] == "Navigate to https://example.com/a"
    assert '"current_url": "actual_url"' in _sent_actions(fake_client)[1]

    fake_client.calls.clear()
    session_tools.wait_for_element(ctx, "sess", "the cart icon", timeout=15)
    sent = _sent_actions(fake_client)
    assert sent[0] == "Wait up to 15 seconds for this element to appear: the cart icon"
    assert sent[1].endswith('{"element_found": false, "error": "Element not found within timeout"}.')

    fake_client.calls.clear()
    session_tools.get_page_info(ctx, "sess")
    sent = _sent_actions(fake_client)
    assert sent[0].startswith("Extract comprehensive page information")
    assert '"page_structure"' in sent[1]


def test_get_session_status_single_read(ctx: ToolContext, fake_client: FakeClient) -> None:
    fake_client.on("GET", "tasks/sess", make_response({"status": "pending"}))
    assert json.loads(session_tools.get_session_status(ctx, "sess")) == {"status": "pending"}
    assert fake_client.count("GET", "tasks/sess") == 1


def test_get_session_status_failure(ctx: ToolContext, fake_client: FakeClient) -> None:
    fake_client.on("GET", "tasks/sess", make_response(raw=b"unknown task", status=404, status_text="Not Found"))
    with pytest.raises(RequestFailed) as exc:
        session_tools.get_session_status(ctx, "sess")
    assert str(exc.value) == "Failed to get session status: 404 Not Found - unknown task"


def test_list_active_sessions_format(api_config, fake_client: FakeClient) -> None:  # noqa: ANN001
    clock = iter([1_700_000_000.0, 1_700_000_060.0])
    sessions = SessionRegistry(clock=lambda: next(clock))
    sessions.track("sess")
    sessions.touch("sess")
    ctx = ToolContext(config=api_config, client=fake_client, sessions=sessions, stats=ToolCallStats())  # type: ignore[arg-type]

    data = json.loads(session_tools.list_active_sessions(ctx, now=1_700_000_600.0))

    assert data["totalSessions"] == 1
    assert data["activeSessions"] == [
        {
            "executionId": "sess",
            "created": "2023-11-14T22:13:20.000Z",
            "lastActivity": "2023-11-14T22:14:20.000Z",
            "ageMinutes": 10,
        }
    ]
    assert data["timestamp"] == "2023-11-14T22:23:20.000Z"


def test_handlers_coerce_defaults(ctx: ToolContext, fake_client: FakeClient) -> None:
    _script_session(fake_client)
    ALL_HANDLERS["interact_and_extract_in_session"]({"instructions": ["Click"], "executionId": "sess"}, ctx)
    sent = _sent_actions(fake_client)
    assert len(sent) == 3  # action + default wait + default extraction


def test_handlers_reject_missing_arguments(ctx: ToolContext) -> None:
    with pytest.raises(InvalidArguments):
        ALL_HANDLERS["navigate_to_url"]({"url": "https://example.com"}, ctx)
    with pytest.raises(InvalidArguments):
        ALL_HANDLERS["batch_actions"]({"actions": "Login", "executionId": "sess"}, ctx)


def test_start_handler_defaults_country(ctx: ToolContext, fake_client: FakeClient) -> None:
    fake_client.on("POST", "tasks", make_response({"executionId": "sess"}))
    fake_client.on("GET", "tasks/sess", make_response({"status": "finalized", "result": {}}))
    ALL_HANDLERS["start_new_session"]({"instruction": "Go", "geoLocation": {}}, ctx)
    assert fake_client.calls[0][2]["geoLocation"] == {"country": "US"}
