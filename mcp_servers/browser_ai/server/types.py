"""
Type definitions for MCP server responses and handlers.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from ..tasks import TaskContext

if TYPE_CHECKING:
    from ..config import ApiConfig
    from ..http_client import ApiClient
    from ..sessions import SessionRegistry
    from .instrumentation import ToolCallStats


@dataclass(slots=True)
class ToolContent:
    """Single content item in tool response."""

    type: str
    text: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "text": self.text}


@dataclass(slots=True)
class ToolResult:
    """Result of a tool execution."""

    content: list[ToolContent] = field(default_factory=list)
    is_error: bool = False

    @classmethod
    def text(cls, text: str) -> ToolResult:
        """Tool payloads are already JSON text; pass them through verbatim."""
        return cls(content=[ToolContent(type="text", text=text or "")])

    @classmethod
    def error(cls, message: str, *, tool: str | None = None) -> ToolResult:
        payload: dict[str, Any] = {"ok": False, "error": message}
        if tool:
            payload["tool"] = tool
        return cls(content=[ToolContent(type="text", text=json.dumps(payload, ensure_ascii=False))], is_error=True)

    def to_content_list(self) -> list[dict[str, Any]]:
        """Convert to MCP content list format."""
        return [c.to_dict() for c in self.content]


@dataclass
class ToolContext:
    """Everything a tool handler needs for one invocation."""

    config: ApiConfig
    client: ApiClient
    sessions: SessionRegistry
    stats: ToolCallStats
    task: TaskContext = field(default_factory=TaskContext)
    sleep: Callable[[float], None] | None = None

    @property
    def log(self) -> logging.Logger | logging.LoggerAdapter:
        return self.task.log


ToolFunc = Callable[[dict[str, Any], ToolContext], str]
