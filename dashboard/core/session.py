"""
Per-caller session state.

A SessionStore holds the bearer token of a single user session. The web layer
keeps one store per browser session in a SessionRegistry, so concurrent users
never share a token. Only sessions that hold a token are registered, and idle
ones expire together with their cookie.
"""

from __future__ import annotations

import secrets
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from dashboard.core.logging import get_logger

logger = get_logger(__name__)

SessionListener = Callable[["SessionStore"], None]


class SessionStore:
    """Holds the current bearer token with an explicit set/get/clear lifecycle."""

    def __init__(
        self,
        token: Optional[str] = None,
        on_change: Optional[SessionListener] = None,
    ) -> None:
        self._lock = threading.Lock()
        self._token = token
        self._invalidated = False
        self._on_change = on_change

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(self)

    def set_token(self, token: str) -> None:
        """Replace the current token and re-arm the expiry redirect."""
        with self._lock:
            self._token = token
            self._invalidated = False
        self._notify()

    def get_token(self) -> Optional[str]:
        with self._lock:
            return self._token

    def clear_token(self) -> None:
        """Remove the token. Clearing an empty session is a no-op."""
        with self._lock:
            self._token = None
        self._notify()

    def invalidate(self) -> bool:
        """
        Clear the token after the server rejected it.

        Returns:
            True only for the first invalidation since the last set_token,
            so callers perform at most one redirect per expired session.
        """
        with self._lock:
            self._token = None
            first = not self._invalidated
            self._invalidated = True
        self._notify()
        return first

    @property
    def is_authenticated(self) -> bool:
        return self.get_token() is not None


@dataclass
class _Entry:
    store: SessionStore
    last_seen: float


class SessionRegistry:
    """
    Maps browser session ids to their SessionStore.

    A store enters the registry when a token is set on it and leaves when the
    token is cleared or the session sits idle longer than ``ttl`` seconds.
    """

    def __init__(self, ttl: float, clock: Callable[[], float] = time.monotonic) -> None:
        self._lock = threading.Lock()
        self._sessions: dict[str, _Entry] = {}
        self._ttl = ttl
        self._clock = clock
        self.expired_count = 0

    @staticmethod
    def new_session_id() -> str:
        return secrets.token_urlsafe(32)

    def get(self, session_id: str) -> SessionStore:
        """Return the store for session_id, or an unregistered empty one."""
        with self._lock:
            now = self._clock()
            self._evict_idle(now)
            entry = self._sessions.get(session_id)
            if entry is not None:
                entry.last_seen = now
                return entry.store
        return SessionStore(on_change=lambda store: self._sync(session_id, store))

    def record_expiry(self, redirect_to: str) -> None:
        """Count a session the detector service rejected."""
        with self._lock:
            self.expired_count += 1
            total = self.expired_count
        logger.info("session_invalidated", redirect_to=redirect_to, expired_total=total)

    def _sync(self, session_id: str, store: SessionStore) -> None:
        token = store.get_token()
        with self._lock:
            if token is None:
                self._sessions.pop(session_id, None)
            else:
                self._sessions[session_id] = _Entry(store, self._clock())
            active = len(self._sessions)
        logger.debug("session_synced", authenticated=token is not None, active_sessions=active)

    def _evict_idle(self, now: float) -> None:
        idle = [sid for sid, entry in self._sessions.items() if now - entry.last_seen > self._ttl]
        for sid in idle:
            del self._sessions[sid]
        if idle:
            logger.info("sessions_evicted", count=len(idle), active_sessions=len(self._sessions))

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
