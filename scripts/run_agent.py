"""CLI entrypoint for chatting with the sourcing agent."""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from typing import Sequence

ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC_DIR = os.path.join(ROOT_DIR, "src")
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

from agent import SourcingAgent  # noqa: E402
from chat.errors import ValidationError  # noqa: E402
from chat.requirements import pill_to_message  # noqa: E402
from chat.turns import AssistantTurn, CardTurn, PillsTurn  # noqa: E402


def render_turn(turn: AssistantTurn) -> str:
    lines = [turn.content or "[no text response]"]
    if isinstance(turn, CardTurn):
        lines.extend(f"  - {point}" for point in turn.summary)
        for attachment in turn.attachments or ():
            lines.append(f"  attachment: {attachment.name or attachment.reference} ({attachment.kind})")
    if isinstance(turn, (PillsTurn, CardTurn)):
        lines.extend(f"  [{i}] {pill}" for i, pill in enumerate(turn.pills, start=1))
    return "\n".join(lines)


def resolve_input(text: str, pills: Sequence[str]) -> str:
    """A bare number picks the matching pill from the last assistant turn."""
    if text.isdigit() and 1 <= int(text) <= len(pills):
        return pill_to_message(pills[int(text) - 1])
    return text


async def run_chat(*, session_id: str) -> None:
    agent = SourcingAgent()
    pills: Sequence[str] = ()

    print("Describe what you need to source (Ctrl+C to exit):")
    while True:
        try:
            text = input("> ").strip()
        except KeyboardInterrupt:
            print("\nbye!")
            return

        if not text:
            continue

        try:
            result = await agent.handle_turn(session_id, resolve_input(text, pills))
        except ValidationError as exc:
            print(f"[rejected] {exc.message}")
            continue

        turn = result.assistant_turn
        print(render_turn(turn))
        if result.diagnostic:
            print(f"[diagnostic] {result.diagnostic}")
        pills = turn.pills if isinstance(turn, (PillsTurn, CardTurn)) else ()


def main() -> None:
    parser = argparse.ArgumentParser(description="Minimal chat CLI for the sourcing agent.")
    parser.add_argument("--session", default="cli", help="Session ID to reuse within this run.")
    args = parser.parse_args()

    asyncio.run(run_chat(session_id=args.session))


if __name__ == "__main__":
    main()
