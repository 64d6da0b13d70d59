"""Workflow tool registry."""

from __future__ import annotations

from .sourcing import (
    get_sourcing_history_tool,
    send_sourcing_message_tool,
)

__all__ = [
    "get_sourcing_history_tool",
    "send_sourcing_message_tool",
]
