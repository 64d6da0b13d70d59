"""Single structured-output round-trip with the chat model."""

from __future__ import annotations

import asyncio
import json
import os
from typing import Any, Dict, List, Optional, Sequence, TYPE_CHECKING

from app_config import get_async_openai_client, get_openai_settings

from .errors import UpstreamFailure
from .response_schema import RESPONSE_FORMAT
from .turns import CardTurn, PillsTurn, TextTurn, Turn, UserTurn

if TYPE_CHECKING:
    from openai import AsyncOpenAI
else:  # pragma: no cover
    AsyncOpenAI = Any  # type: ignore[assignment]

_openai_client: AsyncOpenAI | None = None
_DEBUG_ENABLED = os.getenv("SOURCING_BRIDGE_DEBUG") == "1"


def _elide_images(conversation: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Copy of the conversation with inline image payloads shortened for logs."""
    elided: List[Dict[str, Any]] = []
    for message in conversation:
        content = message.get("content")
        if isinstance(content, list):
            parts = []
            for part in content:
                if part.get("type") == "image_url":
                    url = part["image_url"]["url"]
                    short = f"{url[:32]}... ({len(url)} chars)"
                    parts.append({"type": "image_url", "image_url": {"url": short}})
                else:
                    parts.append(part)
            message = {**message, "content": parts}
        elided.append(message)
    return elided


def _debug_log(label: str, payload: Any) -> None:
    if not _DEBUG_ENABLED:
        return
    try:
        serialized = json.dumps(payload, indent=2, ensure_ascii=False, default=str)
    except TypeError:
        serialized = str(payload)
    print(f"[model_bridge][debug] {label}:\n{serialized}\n")


def _user_message(turn: UserTurn) -> Dict[str, Any]:
    content: List[Dict[str, Any]] = [{"type": "text", "text": turn.content}]
    for image in turn.images:
        content.append({"type": "image_url", "image_url": {"url": image}})
    return {"role": "user", "content": content}


def _assistant_message(turn: Turn) -> Optional[Dict[str, Any]]:
    if isinstance(turn, PillsTurn):
        content = f"{turn.content} [Pills: {', '.join(turn.pills)}]"
    elif isinstance(turn, CardTurn):
        content = f"{turn.content} [Summary Card Shown]"
    elif isinstance(turn, TextTurn):
        content = turn.content
    else:
        return None
    return {"role": "assistant", "content": content}


def build_conversation(
    history: Sequence[Turn],
    *,
    instructions: str,
    max_turns: int = 10,
) -> List[Dict[str, Any]]:
    """System message plus the most recent turns as role-tagged content blocks."""
    conversation: List[Dict[str, Any]] = [{"role": "system", "content": instructions}]
    for turn in list(history)[-max_turns:]:
        if isinstance(turn, UserTurn):
            conversation.append(_user_message(turn))
            continue
        message = _assistant_message(turn)
        if message is not None:
            conversation.append(message)
    return conversation


async def request_structured_reply(
    conversation: Sequence[Dict[str, Any]],
    *,
    model: Optional[str] = None,
    temperature: float = 0.7,
    max_tokens: int = 1000,
    timeout: Optional[float] = None,
    openai_client: Optional[AsyncOpenAI] = None,
) -> Optional[str]:
    """Ask the model for one reply in the chat response format; return its raw JSON text."""
    global _openai_client

    llm = openai_client or _openai_client or get_async_openai_client()
    if _openai_client is None and openai_client is None:
        _openai_client = llm
    model_name = model or get_openai_settings().default_model

    _debug_log("conversation.before_call", _elide_images(conversation))

    call = llm.chat.completions.create(
        model=model_name,
        messages=list(conversation),
        response_format=RESPONSE_FORMAT,
        temperature=temperature,
        max_tokens=max_tokens,
    )
    try:
        if timeout is None:
            response = await call
        else:
            response = await asyncio.wait_for(call, timeout=timeout)
    except asyncio.TimeoutError as exc:
        raise UpstreamFailure(f"Model request timed out after {timeout:g}s") from exc

    if not response.choices:
        raise UpstreamFailure("Model returned no choices")
    content = response.choices[0].message.content
    _debug_log("assistant.raw_reply", content)
    return content


__all__ = ["build_conversation", "request_structured_reply"]
