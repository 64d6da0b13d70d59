"""Shared pytest fixtures."""

from __future__ import annotations

import pytest

from agent import SourcingAgent
from chat.session_store import InMemorySessionStore


@pytest.fixture
def store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def make_agent(store):
    def _make(client, **kwargs) -> SourcingAgent:
        kwargs.setdefault("model", "test-model")
        kwargs.setdefault("request_timeout", 0.5)
        return SourcingAgent(store=store, openai_client=client, **kwargs)

    return _make
