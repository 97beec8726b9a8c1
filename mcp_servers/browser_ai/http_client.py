from __future__ import annotations

import http.client
import json
import ssl
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import HTTPSHandler, Request, build_opener

from .config import ApiConfig
from .errors import HttpError, ParseError, TransportError

HeadersFactory = Callable[[], dict[str, str]]


def api_path(*segments: object) -> str:
    """Join path segments, percent-encoding each one (including any '/')."""
    return "/".join(quote(str(segment), safe="") for segment in segments)


def create_api_headers(name: str, version: str, api_token: str) -> HeadersFactory:
    """Return a factory producing a fresh header dict per outbound request."""

    def headers() -> dict[str, str]:
        return {
            "User-Agent": f"{name}/{version}",
            "Authorization": f"apikey {api_token}",
            "Content-Type": "application/json",
        }

    return headers


@dataclass(slots=True)
class ApiResponse:
    status: int
    status_text: str
    body: bytes
    url: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def text(self) -> str:
        return self.body.decode(errors="replace")

    def json(self) -> Any:
        try:
            return json.loads(self.text())
        except ValueError as exc:
            raise ParseError(f"Invalid JSON from {self.url or 'API'} (HTTP {self.status}): {exc}") from exc

    def raise_for_status(self) -> None:
        if not self.ok:
            raise HttpError(f"HTTP {self.status}: {self.status_text or 'Unknown HTTP error'}", response=self)


class ApiClient:
    """Minimal JSON client for the BrowserAI task API."""

    def __init__(self, config: ApiConfig, headers: HeadersFactory) -> None:
        self._config = config
        self._headers = headers
        self._opener = build_opener(HTTPSHandler(context=ssl.create_default_context()))

    @property
    def base_url(self) -> str:
        return self._config.api_url

    def url(self, path: str) -> str:
        return f"{self._config.api_url}/{path.lstrip('/')}"

    def get(self, path: str) -> ApiResponse:
        return self.request("GET", path)

    def post(self, path: str, body: dict[str, Any]) -> ApiResponse:
        return self.request("POST", path, body)

    def request(self, method: str, path: str, body: dict[str, Any] | None = None) -> ApiResponse:
        url = self.url(path)
        data = json.dumps(body).encode() if body is not None else None
        try:
            req = Request(url, data=data, method=method, headers=self._headers())
            with self._opener.open(req, timeout=self._config.http_timeout) as resp:
                return ApiResponse(status=resp.status, status_text=str(resp.reason or ""), body=self._read(resp, url), url=url)
        except HTTPError as exc:
            # Non-2xx: hand the response back, callers decide how to fail.
            payload = self._read(exc, url) if exc.fp is not None else b""
            return ApiResponse(status=exc.code, status_text=str(exc.reason or ""), body=payload, url=url)
        except (TimeoutError, URLError, OSError, http.client.HTTPException, ValueError) as exc:
            reason = getattr(exc, "reason", None) or exc
            raise TransportError(f"{method} {url}: {reason}") from exc

    def _read(self, resp: Any, url: str) -> bytes:
        limit = self._config.http_max_bytes
        body = resp.read(limit + 1)
        if len(body) > limit:
            raise TransportError(f"Response from {url} exceeds {limit} bytes")
        return body


__all__ = ["ApiClient", "ApiResponse", "HeadersFactory", "api_path", "create_api_headers"]
