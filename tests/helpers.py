"""Fakes shared by the test-suite."""

from __future__ import annotations

import asyncio
import json
from types import SimpleNamespace
from typing import Any, Iterable

SLOW = object()


def envelope(response: dict[str, Any]) -> str:
    return json.dumps({"response": response})


class FakeCompletions:
    """Hands out queued replies; exceptions are raised, ``SLOW`` never finishes in time."""

    def __init__(self, replies: Iterable[Any]):
        self._replies = list(replies)
        self.calls: list[dict[str, Any]] = []

    async def create(self, **kwargs: Any) -> SimpleNamespace:
        self.calls.append(kwargs)
        reply = self._replies.pop(0)
        if reply is SLOW:
            await asyncio.sleep(5)
        if isinstance(reply, BaseException):
            raise reply
        return SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(role="assistant", content=reply))]
        )


def fake_openai(*replies: Any) -> SimpleNamespace:
    completions = FakeCompletions(replies)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


PILLS_REPLY = {
    "type": "pills",
    "content": "Would you like any customization?",
    "pills": ["Custom Length", "Custom Branding", "No Customization"],
}

CARD_REPLY = {
    "type": "card",
    "content": "Here's a summary of your sourcing requirements:",
    "card": {
        "summary": [
            "Product: USB-C Cables",
            "Quantity: 5000 units",
            "Customization: Custom branding",
            "Lead Time: 30-45 days",
            "Incoterms: FOB Shanghai",
            "Shipping: Sea freight to Los Angeles",
        ],
        "attachments": [{"url": "logo.png", "type": "image", "name": None}],
    },
    "pills": ["Edit", "Submit"],
}
