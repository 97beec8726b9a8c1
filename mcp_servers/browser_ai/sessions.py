"""In-memory registry of known task/session ids.

Introspection only: nothing expires and nothing is persisted.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, replace


@dataclass(slots=True)
class SessionRecord:
    created: float
    last_activity: float


class SessionRegistry:
    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._sessions: dict[str, SessionRecord] = {}
        self._lock = threading.Lock()

    def track(self, session_id: str) -> None:
        now = self._clock()
        with self._lock:
            self._sessions[session_id] = SessionRecord(created=now, last_activity=now)

    def touch(self, session_id: str) -> None:
        now = self._clock()
        with self._lock:
            record = self._sessions.get(session_id)
            if record is not None:
                record.last_activity = now

    def list(self) -> list[tuple[str, SessionRecord]]:
        with self._lock:
            return [(sid, replace(rec)) for sid, rec in self._sessions.items()]

    def remove(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


__all__ = ["SessionRecord", "SessionRegistry"]
