"""
Session tool handlers - argument coercion on top of tools.session.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ... import tools as session_tools
from ...errors import InvalidArguments

if TYPE_CHECKING:
    from ..types import ToolContext


def _require_str(args: dict[str, Any], key: str) -> str:
    value = args.get(key)
    if not isinstance(value, str) or not value.strip():
        raise InvalidArguments(f"Missing required string argument: {key}")
    return value


def _str_list(args: dict[str, Any], key: str) -> list[str]:
    value = args.get(key)
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise InvalidArguments(f"Argument {key} must be an array of strings")
    return list(value)


def _bool(args: dict[str, Any], key: str, default: bool) -> bool:
    value = args.get(key)
    return value if isinstance(value, bool) else default


def _number(args: dict[str, Any], key: str, default: float) -> float:
    value = args.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return value


def handle_start_new_session(args: dict[str, Any], ctx: ToolContext) -> str:
    geo = args.get("geoLocation")
    geo_location = None
    if isinstance(geo, dict):
        geo_location = {**geo, "country": geo.get("country") or "US"}
    return session_tools.start_new_session(
        ctx,
        _require_str(args, "instruction"),
        geo_location=geo_location,
        extract_data=_bool(args, "extractData", True),
    )


def handle_interact_and_extract(args: dict[str, Any], ctx: ToolContext) -> str:
    return session_tools.interact_and_extract(
        ctx,
        _require_str(args, "executionId"),
        _str_list(args, "instructions"),
        extract_data=_bool(args, "extractData", True),
        wait_time=_number(args, "waitTime", 2),
    )


def handle_extract_from_session(args: dict[str, Any], ctx: ToolContext) -> str:
    return session_tools.extract_from_session(
        ctx,
        _require_str(args, "executionId"),
        _str_list(args, "instructions"),
    )


def handle_get_session_status(args: dict[str, Any], ctx: ToolContext) -> str:
    return session_tools.get_session_status(ctx, _require_str(args, "executionId"))


def handle_wait_for_element(args: dict[str, Any], ctx: ToolContext) -> str:
    return session_tools.wait_for_element(
        ctx,
        _require_str(args, "executionId"),
        _require_str(args, "instruction"),
        timeout=_number(args, "timeout", 30),
    )


def handle_navigate_to_url(args: dict[str, Any], ctx: ToolContext) -> str:
    return session_tools.navigate_to_url(ctx, _require_str(args, "executionId"), _require_str(args, "url"))


def handle_get_page_info(args: dict[str, Any], ctx: ToolContext) -> str:
    return session_tools.get_page_info(ctx, _require_str(args, "executionId"))


def handle_batch_actions(args: dict[str, Any], ctx: ToolContext) -> str:
    return session_tools.batch_actions(
        ctx,
        _require_str(args, "executionId"),
        _str_list(args, "actions"),
        stop_on_error=_bool(args, "stopOnError", True),
        delay_between_actions=_number(args, "delayBetweenActions", 1),
    )


def handle_list_active_sessions(args: dict[str, Any], ctx: ToolContext) -> str:
    return session_tools.list_active_sessions(ctx)


def handle_get_debug_stats(args: dict[str, Any], ctx: ToolContext) -> str:
    return session_tools.debug_stats(ctx)


SESSION_HANDLERS: dict[str, Any] = {
    "start_new_session": handle_start_new_session,
    "interact_and_extract_in_session": handle_interact_and_extract,
    "extract_from_session": handle_extract_from_session,
    "get_session_status": handle_get_session_status,
    "wait_for_element": handle_wait_for_element,
    "navigate_to_url": handle_navigate_to_url,
    "get_page_info": handle_get_page_info,
    "batch_actions": handle_batch_actions,
    "list_active_sessions": handle_list_active_sessions,
    "get_debug_stats": handle_get_debug_stats,
}
