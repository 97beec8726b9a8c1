from __future__ import annotations

import os
from dataclasses import dataclass

from .errors import ConfigurationError

DEFAULT_API_URL = "https://browser.ai/api/v1"


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return max(0.0, float(raw))
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return max(1, int(raw))
    except ValueError:
        return default


@dataclass
class ApiConfig:
    api_token: str
    project_name: str
    api_url: str = DEFAULT_API_URL
    http_timeout: float = 30.0
    poll_interval: float = 3.0
    settle_delay: float = 1.0
    task_timeout: float = 0.0
    max_workers: int = 4
    http_max_bytes: int = 1_000_000

    @classmethod
    def from_env(cls) -> ApiConfig:
        api_url = (os.environ.get("BROWSER_AI_API_URL") or DEFAULT_API_URL).strip().rstrip("/")
        return cls(
            api_token=(os.environ.get("API_TOKEN") or "").strip(),
            project_name=(os.environ.get("PROJECT_NAME") or "").strip(),
            api_url=api_url or DEFAULT_API_URL,
            http_timeout=_env_float("MCP_HTTP_TIMEOUT", 30.0),
            poll_interval=_env_float("BROWSER_AI_POLL_INTERVAL", 3.0),
            settle_delay=_env_float("BROWSER_AI_SETTLE_DELAY", 1.0),
            task_timeout=_env_float("BROWSER_AI_TASK_TIMEOUT", 0.0),
            max_workers=_env_int("MCP_MAX_WORKERS", 4),
            http_max_bytes=_env_int("MCP_HTTP_MAX_BYTES", 1_000_000),
        )

    def validate(self) -> ApiConfig:
        if not self.api_token:
            raise ConfigurationError("Cannot run MCP server without API_TOKEN env")
        if not self.project_name:
            raise ConfigurationError("Cannot run MCP server without PROJECT_NAME env")
        return self
