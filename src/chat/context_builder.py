"""Render recent history and attached files into a prompt fragment."""

from __future__ import annotations

from typing import List, Sequence

from .turns import CardTurn, Document, PillsTurn, TextTurn, Turn, UserTurn

CONTEXT_TURNS = 10


def describe_assistant_turn(turn: Turn) -> str:
    """Lossy, human-readable projection of an assistant turn."""
    if isinstance(turn, PillsTurn):
        return f"{turn.content} [Options: {', '.join(turn.pills)}]"
    if isinstance(turn, CardTurn):
        bullets = "; ".join(turn.summary)
        return f"{turn.content} [Summary card: {bullets}]"
    if isinstance(turn, TextTurn):
        return turn.content
    return ""


def _describe_turn(turn: Turn) -> str:
    if isinstance(turn, UserTurn):
        return f"User: {turn.content}" if isinstance(turn.content, str) else ""
    text = describe_assistant_turn(turn)
    return f"Assistant: {text}" if text else ""


def build_context_prompt(
    history: Sequence[Turn],
    documents: Sequence[Document] = (),
    *,
    max_turns: int = CONTEXT_TURNS,
) -> str:
    context = ""

    if documents:
        context += "\n\nUser has provided the following files:\n"
        for doc in documents:
            context += f"- {doc.name} ({doc.kind})\n"

    if history:
        lines: List[str] = [_describe_turn(turn) for turn in list(history)[-max_turns:]]
        lines = [line for line in lines if line]
        if lines:
            context += "\n\nConversation context:\n" + "\n".join(lines) + "\n"

    return context


__all__ = ["CONTEXT_TURNS", "build_context_prompt", "describe_assistant_turn"]
