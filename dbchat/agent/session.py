"""
In-memory session store.

Sessions live for the lifetime of the process. Each session owns a string
key/value state (used by the schema cache) and the conversation history the
agent replays on follow-up turns. Access is guarded by a threading.Lock so
the store can be shared between every agent in the pool.
"""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Literal

logger = logging.getLogger(__name__)


class SessionStateError(Exception):
    """Invalid session state write or access to a closed store."""

    pass


@dataclass(frozen=True)
class HistoryEntry:
    """One turn of conversation history."""

    role: Literal["user", "assistant"]
    content: str


class SessionState:
    """String key/value state scoped to one session."""

    def __init__(self, lock: threading.Lock, owner: InMemorySessionService) -> None:
        self._values: dict[str, str] = {}
        self._lock = lock
        self._owner = owner

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        """
        Store a string value.

        Raises:
            SessionStateError: If value is not a str or the store is closed
        """
        if not isinstance(value, str):
            raise SessionStateError(
                f"session state values must be str, got {type(value).__name__} for key {key}"
            )
        with self._lock:
            if self._owner.closed:
                raise SessionStateError("session store is closed")
            self._values[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._values.pop(key, None)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._values)


@dataclass
class Session:
    """A conversation: id, state and history."""

    id: str
    state: SessionState
    history: list[HistoryEntry] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class InMemorySessionService:
    """Process-lifetime session store shared by every agent."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._sessions: dict[str, Session] = {}
        self.closed = False

    def get_or_create(self, session_id: str = "") -> Session:
        """
        Return the session for session_id, creating it when absent.

        An empty session_id starts a new session with a generated id.

        Raises:
            SessionStateError: If the store is closed
        """
        with self._lock:
            if self.closed:
                raise SessionStateError("session store is closed")
            sid = session_id or uuid.uuid4().hex
            session = self._sessions.get(sid)
            if session is None:
                session = Session(id=sid, state=SessionState(self._lock, self))
                self._sessions[sid] = session
                logger.debug(f"Created session {sid}")
            return session

    def get(self, session_id: str) -> Session | None:
        with self._lock:
            return self._sessions.get(session_id)

    def delete(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def append_history(self, session_id: str, entries: list[HistoryEntry]) -> None:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                raise SessionStateError(f"unknown session: {session_id}")
            session.history.extend(entries)

    def history(self, session_id: str) -> list[HistoryEntry]:
        with self._lock:
            session = self._sessions.get(session_id)
            return list(session.history) if session else []

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def close(self) -> None:
        """Drop every session. Later writes raise SessionStateError."""
        with self._lock:
            if self.closed:
                return
            self.closed = True
            count = len(self._sessions)
            self._sessions.clear()
        logger.info(f"Session store closed ({count} sessions dropped)")
