"""
Browser session tools organized by concern:
- prompts: synthetic extraction/wait instructions
- session: session operations built on the task API
"""

from .session import (
    batch_actions,
    debug_stats,
    extract_from_session,
    get_page_info,
    get_session_status,
    interact_and_extract,
    list_active_sessions,
    navigate_to_url,
    start_new_session,
    wait_for_element,
)

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
