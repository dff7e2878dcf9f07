from __future__ import annotations

import secrets
from collections import OrderedDict
from typing import Final

from overlay_dashboard.form import FormSession

SESSION_COOKIE: Final[str] = "od_session"
DEFAULT_MAX_SESSIONS: Final[int] = 1024


class SessionStore:
    """In-memory form sessions keyed by the session cookie.

    Bounded: once `max_sessions` is reached the least recently used session is
    dropped. Nothing survives a restart.
    """

    def __init__(self, max_sessions: int = DEFAULT_MAX_SESSIONS) -> None:
        if max_sessions < 1:
            raise ValueError("max_sessions must be >= 1")
        self._max_sessions = max_sessions
        self._sessions: OrderedDict[str, FormSession] = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def get(self, session_id: str | None) -> FormSession | None:
        if not session_id:
            return None
        session = self._sessions.get(session_id)
        if session is not None:
            self._sessions.move_to_end(session_id)
        return session

    def create(self) -> tuple[str, FormSession]:
        session_id = secrets.token_urlsafe(24)
        session = FormSession()
        self._sessions[session_id] = session
        while len(self._sessions) > self._max_sessions:
            self._sessions.popitem(last=False)
        return session_id, session

    def get_or_create(self, session_id: str | None) -> tuple[str, FormSession, bool]:
        """Return (session_id, session, created)."""

        existing = self.get(session_id)
        if existing is not None and session_id:
            return session_id, existing, False
        new_id, session = self.create()
        return new_id, session, True
