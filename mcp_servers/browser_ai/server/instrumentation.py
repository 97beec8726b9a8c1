"""Uniform instrumentation around every tool implementation.

The wrapper never recovers from a failure: it counts, times, logs and
re-raises with a consistent classification.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from functools import wraps
from typing import Any

from ..errors import ApiError, HttpError, NetworkError, RequestFailed, TransportError
from .redaction import redact_tool_arguments
from .types import ToolContext, ToolFunc


class ToolCallStats:
    """Per-tool invocation counters (diagnostics only)."""

    def __init__(self) -> None:
        self._calls: dict[str, int] = {}
        self._lock = threading.Lock()

    def increment(self, name: str) -> int:
        with self._lock:
            self._calls[name] = self._calls.get(name, 0) + 1
            return self._calls[name]

    def get(self, name: str) -> int:
        with self._lock:
            return self._calls.get(name, 0)

    def snapshot(self) -> dict[str, int]:
        with self._lock:
            return dict(self._calls)


def _http_error(name: str, exc: HttpError, ctx: ToolContext) -> HttpError:
    response = exc.response
    error_text = ""
    try:
        error_text = response.text() if response is not None else ""
    except Exception as text_exc:  # noqa: BLE001
        ctx.log.error("[%s] failed to read error response text: %s", name, text_exc)

    status = response.status if response is not None else None
    status_text = response.status_text if response is not None else ""
    ctx.log.error("[%s] http_error status=%s status_text=%s body=%s", name, status, status_text, error_text)
    detail = error_text or status_text or "Unknown HTTP error"
    return HttpError(f"HTTP {status}: {detail}", response=response)


def create_tool_fn(stats: ToolCallStats) -> Callable[[str, ToolFunc], ToolFunc]:
    def tool_fn(name: str, fn: ToolFunc) -> ToolFunc:
        @wraps(fn)
        def wrapped(arguments: dict[str, Any], ctx: ToolContext) -> str:
            stats.increment(name)
            started = time.monotonic()
            ctx.log.info("[%s] executing tool args=%s", name, redact_tool_arguments(name, arguments))
            try:
                return fn(arguments, ctx)
            except HttpError as exc:
                # RequestFailed messages already name the failed request.
                if exc.response is None or isinstance(exc, RequestFailed):
                    ctx.log.error("[%s] tool_error %s", name, exc)
                    raise
                raise _http_error(name, exc, ctx) from exc
            except TransportError as exc:
                ctx.log.error("[%s] network_error %s", name, exc)
                raise NetworkError(f"Network error: {exc}") from exc
            except ApiError as exc:
                ctx.log.error("[%s] tool_error %s: %s", name, type(exc).__name__, exc)
                raise
            except Exception:
                ctx.log.exception("[%s] unexpected_error", name)
                raise
            finally:
                duration_ms = int((time.monotonic() - started) * 1000)
                ctx.log.info("[%s] tool finished duration_ms=%d", name, duration_ms)

        return wrapped

    return tool_fn


__all__ = ["ToolCallStats", "create_tool_fn"]
