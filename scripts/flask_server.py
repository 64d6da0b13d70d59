from __future__ import annotations

import asyncio
import os
import sys
import threading
from typing import Any, Coroutine, Dict, List, Optional, TypeVar

from flask import Flask, jsonify, request
from uvicorn.middleware.wsgi import WSGIMiddleware
import uvicorn

ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC_DIR = os.path.join(ROOT_DIR, "src")
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

from agent import DEFAULT_SESSION_ID, SourcingAgent  # noqa: E402
from chat.errors import ValidationError  # noqa: E402
from chat.requirements import extract_requirements, pill_to_message, response_stage  # noqa: E402
from chat.turns import CardTurn, Document  # noqa: E402

T = TypeVar("T")

app = Flask(__name__)
sourcing_agent = SourcingAgent()


class _LoopThread:
    """One long-lived event loop so per-session locks are shared by every request."""

    def __init__(self) -> None:
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._lock = threading.Lock()

    def _ensure_loop(self) -> asyncio.AbstractEventLoop:
        with self._lock:
            if self._loop is None:
                loop = asyncio.new_event_loop()
                thread = threading.Thread(
                    target=loop.run_forever, name="sourcing-agent-loop", daemon=True
                )
                thread.start()
                self._loop = loop
            return self._loop

    def run(self, coro: Coroutine[Any, Any, T]) -> T:
        future = asyncio.run_coroutine_threadsafe(coro, self._ensure_loop())
        return future.result()


_runner = _LoopThread()


def _session_id(payload: Dict[str, Any]) -> str:
    return str(payload.get("sessionId") or payload.get("conversationId") or DEFAULT_SESSION_ID)


def _parse_documents(raw: Any) -> List[Document]:
    if raw is None:
        return []
    if not isinstance(raw, list) or not all(isinstance(item, dict) for item in raw):
        raise ValueError("files must be a list of {name, content, type} objects")
    return [Document.from_dict(item) for item in raw]


def _parse_images(raw: Any) -> List[Any]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValueError("images must be a list of base64 data URIs")
    return raw


@app.post("/api/chat")
def chat_endpoint():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return jsonify({"error": "Request body must be a JSON object"}), 400

    session_id = _session_id(payload)
    message = payload.get("message")
    pill = payload.get("pill")
    if message is None and isinstance(pill, str):
        message = pill_to_message(pill)

    try:
        images = _parse_images(payload.get("images"))
        documents = _parse_documents(payload.get("files") or payload.get("documents"))
    except ValueError as exc:
        return jsonify({"error": str(exc), "reason": "malformed_request", "sessionId": session_id}), 400

    try:
        result = _runner.run(
            sourcing_agent.handle_turn(session_id, message, images=images, documents=documents)
        )
    except ValidationError as exc:
        app.logger.info("Rejected turn for session %s: %s", session_id, exc.reason)
        return jsonify({"error": exc.message, "reason": exc.reason, "sessionId": session_id}), 400

    turn = result.assistant_turn
    response_data: Dict[str, Any] = {
        "response": turn.to_dict(),
        "sessionId": result.session_id,
        "stage": response_stage(turn.content),
    }
    if isinstance(turn, CardTurn):
        response_data["requirements"] = extract_requirements(turn).to_dict()
    if result.diagnostic:
        app.logger.warning("Fallback turn for session %s: %s", session_id, result.diagnostic)
        response_data["error"] = result.diagnostic
    return jsonify(response_data)


@app.get("/api/chat/history")
def history_endpoint():
    session_id = request.args.get("sessionId") or request.args.get("conversationId") or DEFAULT_SESSION_ID
    messages = [turn.to_dict() for turn in sourcing_agent.history(session_id)]
    return jsonify({"sessionId": session_id, "messages": messages})


@app.get("/health")
def health():
    return jsonify({"status": "ok"})


DEFAULT_HOST = os.environ.get("CHAT_SERVER_HOST", "0.0.0.0")
DEFAULT_PORT = int(os.environ.get("CHAT_SERVER_PORT", "5050"))
DEFAULT_LOG_LEVEL = os.environ.get("CHAT_SERVER_LOG_LEVEL", "info")

# Expose an ASGI wrapper so uvicorn can serve the Flask app.
asgi_app = WSGIMiddleware(app)


if __name__ == "__main__":
    uvicorn.run(
        asgi_app,
        host=DEFAULT_HOST,
        port=DEFAULT_PORT,
        log_level=DEFAULT_LOG_LEVEL,
    )
