"""Session storage for multi-turn claude conversations.

Lookups on unknown ids never fail: ensure/add_turn create the session,
reset/set on a missing id are no-ops or create it as documented per
method. One re-entrant lock guards every operation so concurrent calls
on the same id cannot lose turns.
"""
from __future__ import annotations

import abc
import logging
import threading
import uuid

from .models import ConversationTurn, Session, SessionSummary

logger = logging.getLogger(__name__)


class SessionStore(abc.ABC):
    """Abstract session store interface."""

    @abc.abstractmethod
    def create_session(self) -> str:
        """Insert an empty session under a fresh id and return the id."""

    @abc.abstractmethod
    def ensure_session(self, session_id: str) -> None:
        """Create *session_id* if absent; otherwise just mark it accessed."""

    @abc.abstractmethod
    def get_session(self, session_id: str) -> Session | None:
        """Return a snapshot of the session, or None if unknown."""

    @abc.abstractmethod
    def reset_session(self, session_id: str) -> None:
        """Drop all turns and the native handle; keep id and created_at."""

    @abc.abstractmethod
    def add_turn(self, session_id: str, turn: ConversationTurn) -> None:
        """Append *turn*, creating the session first if needed."""

    @abc.abstractmethod
    def set_native_session_id(self, session_id: str, native_id: str) -> None:
        """Record the CLI's resumable conversation handle."""

    @abc.abstractmethod
    def get_native_session_id(self, session_id: str) -> str | None:
        """Return the CLI's conversation handle, if one was recorded."""

    @abc.abstractmethod
    def list_sessions(self) -> list[SessionSummary]:
        """Summaries of all sessions in insertion order."""


class InMemorySessionStore(SessionStore):
    """Process-local session store backed by a dict."""

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}
        self._lock = threading.RLock()

    def _ensure(self, session_id: str) -> Session:
        session = self._sessions.get(session_id)
        if session is None:
            session = Session(session_id=session_id)
            self._sessions[session_id] = session
            logger.debug("Created session %s", session_id)
        else:
            session.touch()
        return session

    def create_session(self) -> str:
        with self._lock:
            session_id = str(uuid.uuid4())
            while session_id in self._sessions:
                session_id = str(uuid.uuid4())
            self._ensure(session_id)
            return session_id

    def ensure_session(self, session_id: str) -> None:
        with self._lock:
            self._ensure(session_id)

    def get_session(self, session_id: str) -> Session | None:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            session.touch()
            return session.snapshot()

    def reset_session(self, session_id: str) -> None:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return
            session.turns = []
            session.native_session_id = None
            session.touch()
            logger.debug("Reset session %s", session_id)

    def add_turn(self, session_id: str, turn: ConversationTurn) -> None:
        with self._lock:
            self._ensure(session_id).turns.append(turn)

    def set_native_session_id(self, session_id: str, native_id: str) -> None:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return
            session.native_session_id = native_id

    def get_native_session_id(self, session_id: str) -> str | None:
        with self._lock:
            session = self._sessions.get(session_id)
            return session.native_session_id if session else None

    def list_sessions(self) -> list[SessionSummary]:
        with self._lock:
            return [
                SessionSummary(
                    session_id=s.session_id,
                    created_at=s.created_at,
                    last_accessed_at=s.last_accessed_at,
                    turn_count=s.turn_count,
                )
                for s in self._sessions.values()
            ]

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
