from __future__ import annotations

import pytest

from chat.session_store import HISTORY_LIMIT, InMemorySessionStore
from chat.turns import CardTurn, PillsTurn, TextTurn, UserTurn, live_options


def _live_count(turns) -> int:
    return sum(1 for turn in turns if live_options(turn))


def test_unknown_session_is_empty(store: InMemorySessionStore) -> None:
    assert store.get("nobody") == []


def test_get_returns_a_snapshot(store: InMemorySessionStore) -> None:
    store.append_user("s", UserTurn("hello"))
    snapshot = store.get("s")
    snapshot.append(TextTurn("not stored"))
    assert len(store.get("s")) == 1


def test_append_user_deactivates_latest_pill_set(store: InMemorySessionStore) -> None:
    pills = PillsTurn("Pick one", ("A", "B"))
    store.append_user("s", UserTurn("start"))
    store.append_assistant("s", pills)

    store.append_user("s", UserTurn("A"))

    assert pills.active is False
    assert len(store.get("s")) == 3


def test_deactivation_only_touches_one_turn(store: InMemorySessionStore) -> None:
    older = PillsTurn("Older", ("x",))
    newer = CardTurn("Summary", ("Product: cables",))
    store.append_assistant("s", older)
    store.append_assistant("s", newer)

    store.append_user("s", UserTurn("Edit"))

    assert newer.active is False
    assert older.active is True


def test_deactivation_skips_already_inactive_turns(store: InMemorySessionStore) -> None:
    older = PillsTurn("Older", ("x",))
    newer = PillsTurn("Newer", ("y",), active=False)
    store.append_assistant("s", older)
    store.append_assistant("s", TextTurn("plain"))
    store.append_assistant("s", newer)

    store.append_user("s", UserTurn("hi"))

    assert older.active is False


def test_at_most_one_live_option_set_after_append_user(store: InMemorySessionStore) -> None:
    for i in range(5):
        store.append_user("s", UserTurn(f"turn {i}"))
        store.append_assistant("s", PillsTurn(f"options {i}", ("a", "b")))
        store.append_user("s", UserTurn("a"))
        assert _live_count(store.get("s")) == 0
    store.append_assistant("s", CardTurn("Summary", ("Product: x",)))
    assert _live_count(store.get("s")) == 1


def test_trim_keeps_most_recent_turns_in_order(store: InMemorySessionStore) -> None:
    turns = [TextTurn(f"reply {i}") for i in range(HISTORY_LIMIT + 7)]
    for turn in turns:
        store.append_assistant("s", turn)

    history = store.get("s")
    assert len(history) == HISTORY_LIMIT
    assert history == turns[-HISTORY_LIMIT:]


def test_append_user_does_not_trim() -> None:
    store = InMemorySessionStore(history_limit=2)
    for i in range(3):
        store.append_user("s", UserTurn(f"u{i}"))
    assert len(store.get("s")) == 3

    store.append_assistant("s", TextTurn("reply"))
    history = store.get("s")
    assert [turn.content for turn in history] == ["u2", "reply"]


def test_sessions_are_independent(store: InMemorySessionStore) -> None:
    pills = PillsTurn("Pick", ("a",))
    store.append_assistant("one", pills)
    store.append_user("two", UserTurn("hello"))
    assert pills.active is True
    assert len(store.get("two")) == 1


def test_history_limit_must_be_positive() -> None:
    with pytest.raises(ValueError):
        InMemorySessionStore(history_limit=0)
