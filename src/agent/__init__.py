"""Agent entrypoints for the sourcing assistant."""

from __future__ import annotations

from .chat import DEFAULT_SESSION_ID, SourcingAgent, TurnResult

__all__ = [
    "DEFAULT_SESSION_ID",
    "SourcingAgent",
    "TurnResult",
]
