"""
Tool registry with dispatch table for the MCP server.

Every registered handler goes through the instrumentation wrapper, so the
registry is the single entry point for tool calls.
"""

from __future__ import annotations

import logging
from typing import Any

from .instrumentation import ToolCallStats, create_tool_fn
from .types import ToolContext, ToolFunc

logger = logging.getLogger("mcp.browser_ai.registry")


class ToolRegistry:
    def __init__(self, stats: ToolCallStats | None = None) -> None:
        self.stats = stats or ToolCallStats()
        self._tool_fn = create_tool_fn(self.stats)
        self._handlers: dict[str, ToolFunc] = {}

    def register(self, name: str, handler: ToolFunc) -> None:
        """Register a tool handler (wrapped with instrumentation)."""
        self._handlers[name] = self._tool_fn(name, handler)

    def register_many(self, handlers: dict[str, ToolFunc]) -> None:
        for name, handler in handlers.items():
            self.register(name, handler)

    def get(self, name: str) -> ToolFunc | None:
        return self._handlers.get(name)

    def has(self, name: str) -> bool:
        return name in self._handlers

    def dispatch(self, name: str, arguments: dict[str, Any], ctx: ToolContext) -> str:
        handler = self._handlers.get(name)
        if handler is None:
            raise KeyError(f"Unknown tool: {name}")
        return handler(arguments, ctx)

    @property
    def tool_names(self) -> list[str]:
        return list(self._handlers.keys())

    def __len__(self) -> int:
        return len(self._handlers)


def create_default_registry(stats: ToolCallStats | None = None) -> ToolRegistry:
    from .handlers import ALL_HANDLERS

    registry = ToolRegistry(stats)
    registry.register_many(ALL_HANDLERS)
    logger.info("Registered %d tool handlers", len(registry))
    return registry


__all__ = ["ToolRegistry", "create_default_registry", "logger"]
