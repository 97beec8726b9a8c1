"""
MCP tool definitions for BrowserAI sessions.

Every tool returns JSON text. Session tools take the executionId returned by
start_new_session.
"""

from __future__ import annotations

from typing import Any

_SCHEMA = "http://json-schema.org/draft-07/schema#"

_EXECUTION_ID: dict[str, Any] = {
    "type": "string",
    "description": "executionId returned by start_new_session",
}

_INSTRUCTIONS: dict[str, Any] = {
    "type": "array",
    "items": {"type": "string"},
}


def _schema(properties: dict[str, Any], required: list[str]) -> dict[str, Any]:
    return {
        "$schema": _SCHEMA,
        "type": "object",
        "properties": properties,
        "required": required,
    }


# ═══════════════════════════════════════════════════════════════════════════════
# SESSION LIFECYCLE
# ═══════════════════════════════════════════════════════════════════════════════

START_NEW_SESSION_TOOL: dict[str, Any] = {
    "name": "start_new_session",
    "description": (
        "Start a new browser session. "
        'Provide an instruction like "Go to https://example.com" or "Search for products on Amazon". '
        "Returns executionId for the session and initial page data with interactive elements and HTML markup."
    ),
    "inputSchema": _schema(
        {
            "instruction": {"type": "string"},
            "geoLocation": {
                "type": "object",
                "properties": {"country": {"type": "string", "default": "US"}},
            },
            "extractData": {"type": "boolean", "default": True},
        },
        ["instruction"],
    ),
}

GET_SESSION_STATUS_TOOL: dict[str, Any] = {
    "name": "get_session_status",
    "description": (
        "Check the current status and information of a browser session. Useful for debugging or verifying session state."
    ),
    "inputSchema": _schema({"executionId": _EXECUTION_ID}, ["executionId"]),
}

LIST_ACTIVE_SESSIONS_TOOL: dict[str, Any] = {
    "name": "list_active_sessions",
    "description": (
        "List all currently active browser sessions with their status and basic information. "
        "Useful for session management and debugging."
    ),
    "inputSchema": _schema({}, []),
}

GET_DEBUG_STATS_TOOL: dict[str, Any] = {
    "name": "get_debug_stats",
    "description": "Per-tool call counters and number of tracked sessions for this server process.",
    "inputSchema": _schema({}, []),
}

# ═══════════════════════════════════════════════════════════════════════════════
# INTERACTION
# ═══════════════════════════════════════════════════════════════════════════════

INTERACT_AND_EXTRACT_TOOL: dict[str, Any] = {
    "name": "interact_and_extract_in_session",
    "description": (
        "Interact with elements in an existing browser session. "
        'Provide an array of instructions like ["Click the login button", '
        '"Fill email field with test@example.com", "Scroll down"]. '
        "Returns updated page data after the interactions."
    ),
    "inputSchema": _schema(
        {
            "instructions": _INSTRUCTIONS,
            "executionId": _EXECUTION_ID,
            "extractData": {"type": "boolean", "default": True},
            "waitTime": {"type": "number", "default": 2},
        },
        ["instructions", "executionId"],
    ),
}

EXTRACT_FROM_SESSION_TOOL: dict[str, Any] = {
    "name": "extract_from_session",
    "description": (
        "Extract specific data from the current page in a browser session. "
        'Provide an array of extraction instructions, e.g., ["Extract all product names and prices as JSON array", '
        '"Get the page title and meta description"].'
    ),
    "inputSchema": _schema({"instructions": _INSTRUCTIONS, "executionId": _EXECUTION_ID}, ["instructions", "executionId"]),
}

WAIT_FOR_ELEMENT_TOOL: dict[str, Any] = {
    "name": "wait_for_element",
    "description": (
        "Wait for a specific element to appear on the page before proceeding. "
        "Useful for dynamic content that loads after page load. "
        "Provide element selector or description to wait for."
    ),
    "inputSchema": _schema(
        {
            "instruction": {"type": "string"},
            "executionId": _EXECUTION_ID,
            "timeout": {"type": "number", "default": 30},
        },
        ["instruction", "executionId"],
    ),
}

NAVIGATE_TO_URL_TOOL: dict[str, Any] = {
    "name": "navigate_to_url",
    "description": (
        "Navigate to a specific URL in an existing browser session. "
        "Useful for moving between pages while maintaining session state."
    ),
    "inputSchema": _schema({"url": {"type": "string"}, "executionId": _EXECUTION_ID}, ["url", "executionId"]),
}

GET_PAGE_INFO_TOOL: dict[str, Any] = {
    "name": "get_page_info",
    "description": (
        "Get comprehensive information about the current page including title, URL, meta tags, and page structure. "
        "Useful for understanding page context before interactions."
    ),
    "inputSchema": _schema({"executionId": _EXECUTION_ID}, ["executionId"]),
}

BATCH_ACTIONS_TOOL: dict[str, Any] = {
    "name": "batch_actions",
    "description": (
        "Execute multiple actions in sequence within a single browser session. "
        "Provide an array of actions to perform one after another. "
        "Useful for complex workflows like login -> navigate -> extract data."
    ),
    "inputSchema": _schema(
        {
            "actions": _INSTRUCTIONS,
            "executionId": _EXECUTION_ID,
            "stopOnError": {"type": "boolean", "default": True},
            "delayBetweenActions": {"type": "number", "default": 1},
        },
        ["actions", "executionId"],
    ),
}


TOOL_DEFINITIONS: list[dict[str, Any]] = [
    START_NEW_SESSION_TOOL,
    INTERACT_AND_EXTRACT_TOOL,
    EXTRACT_FROM_SESSION_TOOL,
    GET_SESSION_STATUS_TOOL,
    WAIT_FOR_ELEMENT_TOOL,
    NAVIGATE_TO_URL_TOOL,
    GET_PAGE_INFO_TOOL,
    BATCH_ACTIONS_TOOL,
    LIST_ACTIVE_SESSIONS_TOOL,
    GET_DEBUG_STATS_TOOL,
]
