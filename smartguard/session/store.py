# In-memory registry of live sessions. Nothing is persisted.
# Sessions idle past the TTL are evicted; the oldest go first when the cap is hit.

from __future__ import annotations

import logging
import time
import uuid
from typing import Callable, Dict

from smartguard.gateway import AIGateway
from .controller import SessionController

logger = logging.getLogger(__name__)


class SessionStore:
    def __init__(
        self,
        gateway: AIGateway,
        emergency_number: str = "112",
        ttl_seconds: float = 3600.0,
        max_sessions: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.gateway = gateway
        self.emergency_number = emergency_number
        self.ttl_seconds = ttl_seconds
        self.max_sessions = max_sessions
        self.clock = clock
        self._sessions: Dict[str, SessionController] = {}
        self._last_seen: Dict[str, float] = {}

    def _evict_idle(self) -> None:
        cutoff = self.clock() - self.ttl_seconds
        for session_id in [sid for sid, seen in self._last_seen.items() if seen <= cutoff]:
            logger.info("Evicting idle session %s", session_id)
            self._forget(session_id)

    def _forget(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)
        self._last_seen.pop(session_id, None)

    def create(self) -> str:
        self._evict_idle()
        while self._sessions and len(self._sessions) >= self.max_sessions:
            oldest = min(self._last_seen, key=self._last_seen.get)
            logger.info("Session cap reached; evicting %s", oldest)
            self._forget(oldest)

        session_id = uuid.uuid4().hex
        self._sessions[session_id] = SessionController(self.gateway, emergency_number=self.emergency_number)
        self._last_seen[session_id] = self.clock()
        return session_id

    def get(self, session_id: str) -> SessionController:
        self._evict_idle()
        if session_id not in self._sessions:
            raise KeyError(f"Session '{session_id}' not found")
        self._last_seen[session_id] = self.clock()
        return self._sessions[session_id]

    def drop(self, session_id: str) -> None:
        self.get(session_id)
        self._forget(session_id)

    def __len__(self) -> int:
        return len(self._sessions)
