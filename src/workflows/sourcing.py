"""Sourcing dialogue workflow tools."""

from __future__ import annotations

from typing import Any, Literal, Optional

from fastmcp import Context
from pydantic import BaseModel

from agent import DEFAULT_SESSION_ID, SourcingAgent
from chat.errors import ValidationError
from chat.requirements import extract_requirements, response_stage
from chat.turns import CardTurn

_agent: SourcingAgent | None = None


def get_default_agent() -> SourcingAgent:
    """Process-wide agent shared by every tool call."""
    global _agent
    if _agent is None:
        _agent = SourcingAgent()
    return _agent


# ---------------------------------------------------------------------------
# Pydantic models for structured results
# ---------------------------------------------------------------------------


class SendMessageResult(BaseModel):
    status: Literal["success", "error"]
    sessionId: str
    response: Optional[dict[str, Any]] = None
    stage: Optional[str] = None
    requirements: Optional[dict[str, Any]] = None
    diagnostic: Optional[str] = None
    message: Optional[str] = None


class HistoryResult(BaseModel):
    status: Literal["success", "error"]
    sessionId: str
    messages: list[dict[str, Any]]


async def send_sourcing_message_tool(
    *,
    session_id: str | None = None,
    message: str,
    agent: SourcingAgent | None = None,
    context: Context | None = None,
) -> dict[str, Any]:
    """Submit one user message to a sourcing session and return the assistant turn."""
    session_id = session_id or DEFAULT_SESSION_ID
    agent = agent or get_default_agent()
    try:
        result = await agent.handle_turn(session_id, message)
    except ValidationError as exc:
        if context:
            await context.error(f"Rejected sourcing message: {exc.message}")
        return SendMessageResult(
            status="error", sessionId=session_id, message=exc.message
        ).model_dump()

    turn = result.assistant_turn
    if context and result.degraded:
        await context.warning(f"Model call degraded: {result.diagnostic}")

    requirements = None
    if isinstance(turn, CardTurn):
        requirements = extract_requirements(turn).to_dict()
    return SendMessageResult(
        status="success",
        sessionId=session_id,
        response=turn.to_dict(),
        stage=response_stage(turn.content),
        requirements=requirements,
        diagnostic=result.diagnostic,
    ).model_dump()


async def get_sourcing_history_tool(
    *,
    session_id: str | None = None,
    agent: SourcingAgent | None = None,
    context: Context | None = None,
) -> dict[str, Any]:
    """Return the stored turns of a sourcing session, oldest first."""
    session_id = session_id or DEFAULT_SESSION_ID
    agent = agent or get_default_agent()
    messages = [turn.to_dict() for turn in agent.history(session_id)]
    if context:
        await context.info(f"Session {session_id} holds {len(messages)} turns")
    return HistoryResult(status="success", sessionId=session_id, messages=messages).model_dump()
