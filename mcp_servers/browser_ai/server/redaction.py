"""Redaction utilities for logging and frame-dumps.

Removes obvious secrets from logged tool arguments and truncates large
text payloads (HTML markup in task results) in traced frames.
"""

from __future__ import annotations

import os
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from ..sensitivity import is_sensitive_key

_INSTRUCTION_KEYS = {"instruction", "instructions", "actions"}
_SECRET_HINTS = ("password", "passwd", "secret", "token", "api key", "apikey")


def redact_url(url: str) -> str:
    """Redact sensitive query params and userinfo; normal queries stay intact."""
    if not isinstance(url, str) or not url:
        return url
    try:
        parts = urlsplit(url)
    except ValueError:
        return url

    changed = False
    netloc = parts.netloc
    query = parts.query
    if "@" in netloc:
        netloc = netloc.split("@", 1)[1]
        changed = True

    if query:
        pairs = parse_qsl(query, keep_blank_values=True)
        out_pairs = [(k, "<redacted>" if is_sensitive_key(k) and v else v) for k, v in pairs]
        if out_pairs != pairs:
            query = urlencode(out_pairs, doseq=True)
            changed = True

    if not changed:
        return url
    return urlunsplit((parts.scheme, netloc, parts.path, query, parts.fragment))


def _redacted_summary(value: Any) -> str:
    if value is None:
        return "<redacted>"
    if isinstance(value, str):
        return f"<redacted str len={len(value)}>"
    if isinstance(value, (list, tuple, set)):
        return f"<redacted list len={len(value)}>"
    if isinstance(value, dict):
        return f"<redacted dict keys={len(value)}>"
    return "<redacted>"


def _redact_instruction(text: str) -> str:
    # Free-text instructions like "Fill password with hunter2" carry secrets inline.
    lowered = text.lower()
    if any(hint in lowered for hint in _SECRET_HINTS):
        return _redacted_summary(text)
    return text


def _redact_any(value: Any, *, key: str | None) -> Any:
    if isinstance(value, dict):
        return {k: _redact_any(v, key=str(k)) for k, v in value.items()}

    lk = (key or "").lower()
    if isinstance(value, list):
        return [_redact_any(v, key=key) for v in value]
    if isinstance(value, str) and lk == "url":
        return redact_url(value)
    if isinstance(value, str) and lk in _INSTRUCTION_KEYS:
        return _redact_instruction(value)
    if key and is_sensitive_key(key):
        return _redacted_summary(value)
    return value


def redact_tool_arguments(tool: str, args: dict[str, Any]) -> dict[str, Any]:  # noqa: ARG001
    """Redact tool arguments for safe logging."""
    return _redact_any(args or {}, key=None)


def _dump_max_chars() -> int:
    raw = os.environ.get("MCP_DUMP_FRAMES_MAX_CHARS", "5000").strip()
    try:
        return max(0, int(raw))
    except ValueError:
        return 5000


def redact_jsonrpc_for_dump(payload: dict[str, Any], *, max_text_chars: int | None = None) -> dict[str, Any]:
    """Redact a JSON-RPC message for file dumps (tool args + long result text)."""
    max_text_chars = max_text_chars if max_text_chars is not None else _dump_max_chars()
    msg = dict(payload) if isinstance(payload, dict) else {}

    if msg.get("method") in {"tools/call", "call_tool"}:
        params = msg.get("params")
        if isinstance(params, dict):
            name = params.get("name")
            args = params.get("arguments") or params.get("args")
            if isinstance(name, str) and isinstance(args, dict):
                params = dict(params)
                params["arguments"] = redact_tool_arguments(name, args)
                params.pop("args", None)
                msg["params"] = params

    result = msg.get("result")
    if isinstance(result, dict) and isinstance(result.get("content"), list):
        content = []
        for item in result["content"]:
            text = item.get("text") if isinstance(item, dict) else None
            if isinstance(text, str) and len(text) > max_text_chars:
                item = {**item, "text": text[:max_text_chars] + f"… <truncated len={len(text)}>"}
            content.append(item)
        msg["result"] = {**result, "content": content}
    return msg


def redact_jsonrpc_for_log(payload: dict[str, Any]) -> dict[str, Any]:
    """Stricter redaction for logs (shorter)."""
    return redact_jsonrpc_for_dump(payload, max_text_chars=512)


__all__ = ["redact_jsonrpc_for_dump", "redact_jsonrpc_for_log", "redact_tool_arguments", "redact_url"]
