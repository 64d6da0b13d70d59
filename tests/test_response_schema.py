from __future__ import annotations

import copy
import json

import pydantic
import pytest

from chat.errors import SchemaViolation, UpstreamFailure
from chat.response_schema import RESPONSE_FORMAT, decode_assistant_turn, parse_model_reply
from chat.turns import CardTurn, PillsTurn, TextTurn
from helpers import CARD_REPLY, PILLS_REPLY, envelope


def test_decodes_text_variant() -> None:
    turn = decode_assistant_turn({"type": "text", "content": "Hello!"})
    assert isinstance(turn, TextTurn)
    assert turn.content == "Hello!"


def test_decodes_pills_variant_active_by_default() -> None:
    turn = decode_assistant_turn(PILLS_REPLY)
    assert isinstance(turn, PillsTurn)
    assert turn.pills == ("Custom Length", "Custom Branding", "No Customization")
    assert turn.active is True


def test_decodes_card_with_unnamed_attachment() -> None:
    turn = decode_assistant_turn(CARD_REPLY)
    assert isinstance(turn, CardTurn)
    assert turn.pills == ("Edit", "Submit")
    assert turn.summary[0] == "Product: USB-C Cables"
    assert turn.attachments is not None
    assert turn.attachments[0].kind == "image"
    assert turn.attachments[0].name is None
    assert turn.active is True


def test_card_without_attachments_is_legal() -> None:
    payload = copy.deepcopy(CARD_REPLY)
    payload["card"]["attachments"] = None
    turn = decode_assistant_turn(payload)
    assert isinstance(turn, CardTurn)
    assert turn.attachments is None


@pytest.mark.parametrize(
    "pills",
    [["Edit"], ["Edit", "Submit", "Extra"], ["Submit", "Edit"], []],
)
def test_card_rejects_anything_but_edit_submit(pills) -> None:
    payload = copy.deepcopy(CARD_REPLY)
    payload["pills"] = pills
    with pytest.raises(SchemaViolation):
        decode_assistant_turn(payload)


def test_card_rejects_unknown_attachment_kind() -> None:
    payload = copy.deepcopy(CARD_REPLY)
    payload["card"]["attachments"] = [{"url": "spec.pdf", "type": "video", "name": "Spec"}]
    with pytest.raises(SchemaViolation):
        decode_assistant_turn(payload)


def test_pills_must_not_be_empty() -> None:
    with pytest.raises(SchemaViolation):
        decode_assistant_turn({"type": "pills", "content": "Pick one", "pills": []})


@pytest.mark.parametrize(
    "payload",
    [
        {"content": "no tag"},
        {"type": "carousel", "content": "unknown tag"},
        {"type": None, "content": "null tag"},
        ["not", "an", "object"],
        {"type": "text"},
        {"type": "pills", "content": "x", "pills": ["ok", 3]},
        {"type": "card", "content": "no card", "pills": ["Edit", "Submit"]},
    ],
)
def test_malformed_payloads_are_schema_violations(payload) -> None:
    with pytest.raises(SchemaViolation):
        decode_assistant_turn(payload)


@pytest.mark.parametrize(
    "mutate",
    [
        lambda p: p.update(pillsActive="yes"),
        lambda p: p["card"].update(attachments=[{"url": "a.png", "type": "image", "name": 7}]),
        lambda p: p["card"].update(summary="Product: cables"),
    ],
)
def test_card_field_types_are_enforced(mutate) -> None:
    payload = copy.deepcopy(CARD_REPLY)
    mutate(payload)
    with pytest.raises(SchemaViolation) as excinfo:
        decode_assistant_turn(payload)
    assert isinstance(excinfo.value.__cause__, pydantic.ValidationError)


def test_pills_active_flag_is_carried_over() -> None:
    turn = decode_assistant_turn({**PILLS_REPLY, "pillsActive": False})
    assert isinstance(turn, PillsTurn)
    assert turn.active is False


def test_schema_violation_is_an_upstream_failure() -> None:
    assert issubclass(SchemaViolation, UpstreamFailure)


def test_parse_model_reply_unwraps_envelope() -> None:
    turn = parse_model_reply(envelope({"type": "text", "content": "Hi"}))
    assert isinstance(turn, TextTurn)


@pytest.mark.parametrize("raw", [None, "", "   "])
def test_parse_model_reply_rejects_empty(raw) -> None:
    with pytest.raises(UpstreamFailure) as excinfo:
        parse_model_reply(raw)
    assert not isinstance(excinfo.value, SchemaViolation)


def test_parse_model_reply_rejects_invalid_json() -> None:
    with pytest.raises(UpstreamFailure):
        parse_model_reply("{not json")


def test_parse_model_reply_requires_envelope() -> None:
    with pytest.raises(SchemaViolation):
        parse_model_reply(json.dumps({"type": "text", "content": "bare"}))


def test_response_format_lists_the_three_variants() -> None:
    schema = RESPONSE_FORMAT["json_schema"]["schema"]
    variants = schema["properties"]["response"]["anyOf"]
    tags = [variant["properties"]["type"]["enum"] for variant in variants]
    assert tags == [["text"], ["pills"], ["card"]]
    assert RESPONSE_FORMAT["json_schema"]["strict"] is True
