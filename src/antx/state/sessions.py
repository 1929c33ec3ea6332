"""Conversation sessions for the chat-style commands.

A session is a named, append-only list of ``{role, content}`` messages that
``chat -c`` and ``rag -c`` replay to the server. Sessions are created lazily
and live until removed or the shell exits.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any


class ReadWriteLock:
    """Many readers or one writer.

    Writers are preferred once waiting so a steady stream of readers cannot
    starve them.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._waiting_writers:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._waiting_writers += 1
            while self._writer or self._readers:
                self._cond.wait()
            self._waiting_writers -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class Session:
    """Conversation history for one conversation id."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        self._history: list[dict[str, Any]] = []
        self._lock = ReadWriteLock()

    def add_message(self, role: str, content: Any) -> None:
        with self._lock.write():
            self._history.append({"role": role, "content": content})

    def get_history(self) -> list[dict[str, Any]]:
        """Return a copy; callers may mutate it freely."""
        with self._lock.read():
            return [dict(msg) for msg in self._history]

    def history_as_payload(self) -> list[dict[str, Any]]:
        """History in the shape the chat endpoints accept."""
        with self._lock.read():
            return [{"role": m["role"], "content": m["content"]} for m in self._history]

    def is_empty(self) -> bool:
        with self._lock.read():
            return not self._history

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._history)

    def clear(self) -> None:
        with self._lock.write():
            self._history.clear()


class SessionManager:
    """Registry of sessions keyed by conversation id."""

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}
        self._lock = ReadWriteLock()

    def get_or_create(self, session_id: str) -> Session:
        with self._lock.read():
            session = self._sessions.get(session_id)
        if session is not None:
            return session

        with self._lock.write():
            # Another writer may have created it between the two locks
            session = self._sessions.get(session_id)
            if session is None:
                session = Session(session_id)
                self._sessions[session_id] = session
            return session

    def get(self, session_id: str) -> Session | None:
        with self._lock.read():
            return self._sessions.get(session_id)

    def add_message(self, session_id: str, role: str, content: Any) -> None:
        self.get_or_create(session_id).add_message(role, content)

    def get_history(self, session_id: str) -> list[dict[str, Any]]:
        return self.get_or_create(session_id).get_history()

    def is_empty(self, session_id: str) -> bool:
        session = self.get(session_id)
        return session is None or session.is_empty()

    def clear(self, session_id: str) -> None:
        self.get_or_create(session_id).clear()

    def clear_all(self) -> None:
        with self._lock.read():
            sessions = list(self._sessions.values())
        for session in sessions:
            session.clear()

    def remove(self, session_id: str) -> None:
        with self._lock.write():
            self._sessions.pop(session_id, None)

    def remove_all(self) -> None:
        with self._lock.write():
            self._sessions.clear()

    def contains(self, session_id: str) -> bool:
        with self._lock.read():
            return session_id in self._sessions

    def list_ids(self) -> set[str]:
        with self._lock.read():
            return set(self._sessions)

    def count(self) -> int:
        with self._lock.read():
            return len(self._sessions)
