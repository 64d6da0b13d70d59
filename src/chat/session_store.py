"""In-memory session store for sourcing dialogues.

Sessions are created lazily on first reference and live as long as the process.
Swap in another ``SessionStore`` implementation for durable storage.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import Dict, List

from .turns import AssistantTurn, Turn, UserTurn, live_options

HISTORY_LIMIT = 50


class SessionStore(ABC):
    """Interface the orchestrator depends on."""

    @abstractmethod
    def get(self, session_id: str) -> List[Turn]:
        """Return the session history, oldest first (empty for unknown ids)."""

    @abstractmethod
    def append_user(self, session_id: str, turn: UserTurn) -> None:
        """Retire the most recent live pill set, then append ``turn``."""

    @abstractmethod
    def append_assistant(self, session_id: str, turn: AssistantTurn) -> None:
        """Append ``turn`` and trim the history to the retention bound."""


def deactivate_latest_options(turns: List[Turn]) -> bool:
    """Flip ``active`` off on the newest pills/card turn that is still live."""
    for turn in reversed(turns):
        if live_options(turn):
            turn.active = False  # type: ignore[union-attr]
            return True
    return False


class InMemorySessionStore(SessionStore):
    def __init__(self, *, history_limit: int = HISTORY_LIMIT) -> None:
        if history_limit < 1:
            raise ValueError("history_limit must be at least 1")
        self.history_limit = history_limit
        self._sessions: Dict[str, List[Turn]] = {}
        self._lock = threading.Lock()

    def _turns_unlocked(self, session_id: str) -> List[Turn]:
        turns = self._sessions.get(session_id)
        if turns is None:
            turns = []
            self._sessions[session_id] = turns
        return turns

    def get(self, session_id: str) -> List[Turn]:
        with self._lock:
            return list(self._sessions.get(session_id, []))

    def append_user(self, session_id: str, turn: UserTurn) -> None:
        with self._lock:
            turns = self._turns_unlocked(session_id)
            deactivate_latest_options(turns)
            turns.append(turn)

    def append_assistant(self, session_id: str, turn: AssistantTurn) -> None:
        with self._lock:
            turns = self._turns_unlocked(session_id)
            turns.append(turn)
            if len(turns) > self.history_limit:
                del turns[: len(turns) - self.history_limit]


__all__ = [
    "HISTORY_LIMIT",
    "InMemorySessionStore",
    "SessionStore",
    "deactivate_latest_options",
]
