"""Sourcing agent: validates a user turn, asks the model, and records both sides."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence, TYPE_CHECKING

from app_config import ConfigError, get_chat_settings, get_openai_settings
from chat.context_builder import build_context_prompt
from chat.errors import UpstreamFailure, ValidationError
from chat.input_validation import check_user_input
from chat.model_bridge import build_conversation, request_structured_reply
from chat.prompts import EDIT_MODE_PROMPT, FALLBACK_MESSAGE, SYSTEM_PROMPT, is_edit_request
from chat.response_schema import parse_model_reply
from chat.session_store import InMemorySessionStore, SessionStore
from chat.turns import AssistantTurn, Document, TextTurn, Turn, UserTurn

if TYPE_CHECKING:
    from openai import AsyncOpenAI
else:  # pragma: no cover
    AsyncOpenAI = Any  # type: ignore[assignment]

logger = logging.getLogger(__name__)

DEFAULT_SESSION_ID = "default"


@dataclass
class TurnResult:
    session_id: str
    assistant_turn: AssistantTurn
    diagnostic: Optional[str] = None

    @property
    def degraded(self) -> bool:
        return self.diagnostic is not None


class SourcingAgent:
    """Entry point for one dialogue turn; the only writer to the session store."""

    def __init__(
        self,
        *,
        store: Optional[SessionStore] = None,
        openai_client: Optional[AsyncOpenAI] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        instructions: Optional[str] = None,
        request_timeout: Optional[float] = None,
        context_turns: Optional[int] = None,
    ) -> None:
        if request_timeout is not None and request_timeout <= 0:
            raise ConfigError(f"request_timeout must be positive, got {request_timeout!r}")
        self.openai_client = openai_client
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.instructions = instructions
        self.request_timeout = request_timeout
        self.context_turns = context_turns
        self.store = store if store is not None else InMemorySessionStore(
            history_limit=get_chat_settings().history_limit
        )
        self._session_locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}

    @asynccontextmanager
    async def _serialized(self, session_id: str) -> AsyncIterator[None]:
        """Hold the session's lock; drop it once no turn holds or awaits it."""
        lock = self._session_locks.get(session_id)
        if lock is None:
            lock = asyncio.Lock()
            self._session_locks[session_id] = lock
        self._lock_users[session_id] = self._lock_users.get(session_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            remaining = self._lock_users[session_id] - 1
            if remaining:
                self._lock_users[session_id] = remaining
            else:
                del self._lock_users[session_id]
                del self._session_locks[session_id]

    def history(self, session_id: str = DEFAULT_SESSION_ID) -> List[Turn]:
        return self.store.get(session_id)

    def _instructions(self, message: str, documents: Sequence[Document], history: Sequence[Turn]) -> str:
        settings = get_chat_settings()
        base = self.instructions or settings.instructions or SYSTEM_PROMPT
        prompt = base + build_context_prompt(
            history, documents, max_turns=self._context_turns()
        )
        if is_edit_request(message):
            prompt += "\n\n" + EDIT_MODE_PROMPT
        return prompt

    def _context_turns(self) -> int:
        if self.context_turns is not None:
            return self.context_turns
        return get_chat_settings().context_turns

    def _model_options(self) -> Dict[str, Any]:
        options: Dict[str, Any] = {"model": self.model, "temperature": 0.7, "max_tokens": 1000}
        if self.model is None:
            settings = get_openai_settings()
            options.update(
                model=settings.default_model,
                temperature=settings.temperature,
                max_tokens=settings.max_tokens,
            )
        if self.temperature is not None:
            options["temperature"] = self.temperature
        if self.max_tokens is not None:
            options["max_tokens"] = self.max_tokens
        return options

    async def _ask_model(self, conversation: List[Dict[str, Any]]) -> AssistantTurn:
        timeout = self.request_timeout
        if timeout is None:
            timeout = get_chat_settings().request_timeout
        raw = await request_structured_reply(
            conversation,
            timeout=timeout,
            openai_client=self.openai_client,
            **self._model_options(),
        )
        return parse_model_reply(raw)

    async def handle_turn(
        self,
        session_id: str,
        message: str,
        images: Optional[Sequence[str]] = None,
        documents: Optional[Sequence[Document]] = None,
    ) -> TurnResult:
        """Run one user turn; raises ``ValidationError`` only, otherwise always returns a turn."""
        check = check_user_input(message, images, documents)
        if not check.valid:
            raise ValidationError(check.reason or "invalid_input", check.error or "Invalid input")

        documents = list(documents or [])
        async with self._serialized(session_id):
            self.store.append_user(
                session_id,
                UserTurn(content=message, images=list(images or []), documents=documents),
            )
            history = self.store.get(session_id)

            diagnostic: Optional[str] = None
            try:
                conversation = build_conversation(
                    history,
                    instructions=self._instructions(message, documents, history),
                    max_turns=self._context_turns(),
                )
                assistant_turn = await self._ask_model(conversation)
            except asyncio.CancelledError:
                # The user turn is already stored; close it before propagating.
                logger.warning("Turn cancelled for session %s; recording fallback", session_id)
                self.store.append_assistant(session_id, TextTurn(content=FALLBACK_MESSAGE))
                raise
            except Exception as exc:
                # Anything past input validation degrades to the apology turn.
                if isinstance(exc, UpstreamFailure):
                    diagnostic = str(exc)
                else:
                    diagnostic = f"{type(exc).__name__}: {exc}"
                logger.warning("Falling back for session %s: %s", session_id, diagnostic)
                assistant_turn = TextTurn(content=FALLBACK_MESSAGE)

            self.store.append_assistant(session_id, assistant_turn)

        return TurnResult(session_id=session_id, assistant_turn=assistant_turn, diagnostic=diagnostic)


__all__ = ["DEFAULT_SESSION_ID", "SourcingAgent", "TurnResult"]
