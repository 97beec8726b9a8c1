"""
MCP server exposing BrowserAI remote browser tasks as tool calls.

This module provides the entry point and stdio JSON-RPC handling.
Tool dispatch is handled via the registry in server/registry.py.
"""

from __future__ import annotations

import json
import logging
import os
import sys
import threading
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from .config import ApiConfig
from .errors import ApiError, ConfigurationError
from .http_client import ApiClient, create_api_headers
from .server.contract import (
    DEFAULT_PROTOCOL_VERSION,
    LATEST_PROTOCOL_VERSION,
    SERVER_INFO,
    SUPPORTED_PROTOCOL_VERSIONS,
    initialize_result,
    select_protocol,
    tools_list,
)
from .server.instrumentation import ToolCallStats
from .server.redaction import redact_jsonrpc_for_dump, redact_jsonrpc_for_log
from .server.registry import create_default_registry
from .server.types import ToolContext, ToolResult
from .sessions import SessionRegistry
from .tasks import TaskContext

logger = logging.getLogger("mcp.browser_ai")

__all__ = [
    "SUPPORTED_PROTOCOL_VERSIONS",
    "LATEST_PROTOCOL_VERSION",
    "DEFAULT_PROTOCOL_VERSION",
    "McpServer",
    "main",
]

_write_lock = threading.Lock()


def _dump_frame(direction: bytes, payload: dict[str, Any], raw: bytes) -> None:
    dump_path = os.environ.get("MCP_DUMP_FRAMES")
    if not dump_path:
        return
    if dump_dir := os.path.dirname(dump_path):
        os.makedirs(dump_dir, exist_ok=True)
    with open(dump_path, "ab") as fp:
        fp.write(direction)
        if os.environ.get("MCP_DUMP_FRAMES_RAW") == "1":
            fp.write(raw.rstrip(b"\n") + b"\n")
        else:
            safe = redact_jsonrpc_for_dump(payload)
            fp.write((json.dumps(safe, ensure_ascii=False) + "\n").encode())


def _write_message(payload: dict[str, Any]) -> None:
    """Write JSON-RPC message to stdout (serialized across tool threads)."""
    line = (json.dumps(payload, ensure_ascii=False) + "\n").encode()
    with _write_lock:
        _dump_frame(b"--out--\n", payload, line)
        sys.stdout.buffer.write(line)
        sys.stdout.buffer.flush()


def _read_message() -> dict[str, Any] | None:
    """Read JSON-RPC message from stdin. Returns None on EOF, {} for blank lines."""
    line = sys.stdin.buffer.readline()
    if not line:
        return None
    line = line.strip()
    if not line:
        return {}
    msg = json.loads(line.decode())
    if os.environ.get("MCP_TRACE"):
        logger.info("recv %s", redact_jsonrpc_for_log(msg))
    _dump_frame(b"--in--\n", msg, line)
    return msg


class McpServer:
    """MCP Server with registry-based tool dispatch."""

    def __init__(
        self,
        config: ApiConfig | None = None,
        *,
        client: ApiClient | None = None,
        sessions: SessionRegistry | None = None,
        stats: ToolCallStats | None = None,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        self.config = (config or ApiConfig.from_env()).validate()
        self.headers = create_api_headers(SERVER_INFO["name"], SERVER_INFO["version"], self.config.api_token)
        self.client = client or ApiClient(self.config, self.headers)
        self.sessions = sessions or SessionRegistry()
        self.stats = stats or ToolCallStats()
        self.registry = create_default_registry(self.stats)
        self._sleep = sleep
        self._executor: ThreadPoolExecutor | None = None
        self._inflight: dict[Any, threading.Event] = {}
        self._inflight_lock = threading.Lock()

    def handle_initialize(self, request_id: Any, params: dict[str, Any] | None = None) -> None:
        requested = (params or {}).get("protocolVersion") if isinstance(params, dict) else None
        protocol = select_protocol(requested)
        _write_message({"jsonrpc": "2.0", "id": request_id, "result": initialize_result(protocol)})

    def handle_list_tools(self, request_id: Any) -> None:
        _write_message({"jsonrpc": "2.0", "id": request_id, "result": {"tools": tools_list()}})

    def _progress_sink(self, token: Any) -> Callable[[int, int], None] | None:
        if token is None:
            return None

        def report(progress: int, total: int) -> None:
            _write_message(
                {
                    "jsonrpc": "2.0",
                    "method": "notifications/progress",
                    "params": {"progressToken": token, "progress": progress, "total": total},
                }
            )

        return report

    def build_context(self, name: str, *, progress_token: Any = None, cancel: threading.Event | None = None) -> ToolContext:
        timeout = self.config.task_timeout
        task = TaskContext(
            log=logging.getLogger(f"mcp.browser_ai.tool.{name or 'unknown'}"),
            report_progress=self._progress_sink(progress_token),
            cancel=cancel,
            deadline=time.monotonic() + timeout if timeout > 0 else None,
        )
        return ToolContext(
            config=self.config,
            client=self.client,
            sessions=self.sessions,
            stats=self.stats,
            task=task,
            sleep=self._sleep,
        )

    def handle_call_tool(
        self,
        request_id: Any,
        name: str,
        arguments: dict[str, Any],
        meta: dict[str, Any] | None = None,
        cancel: threading.Event | None = None,
    ) -> None:
        if cancel is None:
            cancel = self._track(request_id)
        try:
            if cancel.is_set():
                result = ToolResult.error("Tool call cancelled before it started", tool=name)
            elif not name:
                result = ToolResult.error("Missing tool name")
            elif not self.registry.has(name):
                result = ToolResult.error(f"Unknown tool: {name}", tool=name)
            else:
                ctx = self.build_context(name, progress_token=(meta or {}).get("progressToken"), cancel=cancel)
                result = ToolResult.text(self.registry.dispatch(name, arguments, ctx))
        except ApiError as exc:
            logger.info("tool_error tool=%s error=%s", name, exc)
            result = ToolResult.error(str(exc), tool=name)
        except Exception as exc:
            logger.exception("tool_call_failed")
            result = ToolResult.error(str(exc), tool=name)
        finally:
            with self._inflight_lock:
                self._inflight.pop(request_id, None)

        _write_message(
            {
                "jsonrpc": "2.0",
                "id": request_id,
                "result": {"content": result.to_content_list(), "isError": result.is_error},
            }
        )

    def _track(self, request_id: Any) -> threading.Event:
        cancel = threading.Event()
        with self._inflight_lock:
            self._inflight[request_id] = cancel
        return cancel

    def handle_cancelled(self, params: dict[str, Any]) -> None:
        request_id = params.get("requestId")
        with self._inflight_lock:
            cancel = self._inflight.get(request_id)
        if cancel is not None:
            logger.info("tool_cancel request_id=%s reason=%s", request_id, params.get("reason"))
            cancel.set()

    def _submit(self, fn: Callable[..., None], *args: Any) -> None:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=self.config.max_workers, thread_name_prefix="mcp-tool")
        self._executor.submit(fn, *args)

    def dispatch(self, message: dict[str, Any]) -> None:
        """Dispatch incoming JSON-RPC message to appropriate handler."""
        if not message:
            return

        method = message.get("method")
        request_id = message.get("id")
        params = message.get("params") or {}

        if method == "initialize":
            self.handle_initialize(request_id, params)
        elif method == "notifications/initialized":
            return
        elif method == "notifications/cancelled":
            self.handle_cancelled(params)
        elif method in ("tools/list", "list_tools"):
            self.handle_list_tools(request_id)
        elif method in ("tools/call", "call_tool"):
            name = params.get("name")
            arguments = params.get("arguments") or params.get("args") or {}
            # Queued calls must already be cancellable.
            cancel = self._track(request_id)
            self._submit(self.handle_call_tool, request_id, name or "", arguments, params.get("_meta"), cancel)
        elif method == "ping":
            _write_message({"jsonrpc": "2.0", "id": request_id, "result": {}})
        elif request_id is None:
            return
        else:
            _write_message(
                {
                    "jsonrpc": "2.0",
                    "id": request_id,
                    "error": {"code": -32601, "message": f"Method {method} not found"},
                }
            )

    def shutdown(self) -> None:
        with self._inflight_lock:
            pending = list(self._inflight.values())
        for cancel in pending:
            cancel.set()
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None


def main() -> None:
    """Main entry point for MCP server."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )
    try:
        server = McpServer()
    except ConfigurationError as exc:
        logger.error("startup_failed: %s", exc)
        raise SystemExit(1) from exc

    logger.info("Starting server api=%s project=%s", server.config.api_url, server.config.project_name)
    try:
        while True:
            try:
                message = _read_message()
            except ValueError as exc:
                _write_message({"jsonrpc": "2.0", "id": None, "error": {"code": -32700, "message": f"Parse error: {exc}"}})
                continue
            if message is None:
                break
            server.dispatch(message)
    finally:
        server.shutdown()


if __name__ == "__main__":
    main()
