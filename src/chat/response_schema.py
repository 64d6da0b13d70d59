"""Decode model replies into one of the three assistant turn shapes."""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Literal, Mapping, Optional, Type, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictStr,
    ValidationError,
    field_validator,
)

from .errors import SchemaViolation, UpstreamFailure
from .turns import CARD_PILLS, AssistantTurn, CardAttachment, CardTurn, PillsTurn, TextTurn

ATTACHMENT_KINDS = ("image", "file")

_STRING_LIST = {"type": "array", "items": {"type": "string"}}

# Strict structured-output schema; mirrors the decoder below.
RESPONSE_FORMAT: Dict[str, Any] = {
    "type": "json_schema",
    "json_schema": {
        "name": "chat_response",
        "strict": True,
        "schema": {
            "type": "object",
            "properties": {
                "response": {
                    "anyOf": [
                        {
                            "type": "object",
                            "properties": {
                                "type": {"type": "string", "enum": ["text"]},
                                "content": {
                                    "type": "string",
                                    "description": "The chatbot's response text",
                                },
                            },
                            "required": ["type", "content"],
                            "additionalProperties": False,
                        },
                        {
                            "type": "object",
                            "properties": {
                                "type": {"type": "string", "enum": ["pills"]},
                                "content": {
                                    "type": "string",
                                    "description": "The main message to display",
                                },
                                "pills": {
                                    **_STRING_LIST,
                                    "description": "Clickable options for the user",
                                },
                            },
                            "required": ["type", "content", "pills"],
                            "additionalProperties": False,
                        },
                        {
                            "type": "object",
                            "properties": {
                                "type": {"type": "string", "enum": ["card"]},
                                "content": {
                                    "type": "string",
                                    "description": "Brief message before the card",
                                },
                                "card": {
                                    "type": "object",
                                    "properties": {
                                        "summary": {
                                            **_STRING_LIST,
                                            "description": "Bullet points of collected requirements",
                                        },
                                        "attachments": {
                                            "type": ["array", "null"],
                                            "description": "User-provided attachments",
                                            "items": {
                                                "type": "object",
                                                "properties": {
                                                    "url": {"type": "string"},
                                                    "type": {
                                                        "type": "string",
                                                        "enum": list(ATTACHMENT_KINDS),
                                                    },
                                                    "name": {"type": ["string", "null"]},
                                                },
                                                "required": ["url", "type", "name"],
                                                "additionalProperties": False,
                                            },
                                        },
                                    },
                                    "required": ["summary", "attachments"],
                                    "additionalProperties": False,
                                },
                                "pills": {
                                    "type": "array",
                                    "items": {"type": "string", "enum": list(CARD_PILLS)},
                                    "description": "Action buttons - always include both Edit and Submit",
                                },
                            },
                            "required": ["type", "content", "card", "pills"],
                            "additionalProperties": False,
                        },
                    ]
                }
            },
            "required": ["response"],
            "additionalProperties": False,
        },
    },
}

class _TextBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    content: StrictStr


class _PillsBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    content: StrictStr
    pills: List[StrictStr] = Field(min_length=1)
    pillsActive: StrictBool = True


class _AttachmentBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    url: StrictStr
    type: Literal["image", "file"]
    name: Optional[StrictStr] = None


class _CardSection(BaseModel):
    model_config = ConfigDict(extra="ignore")

    summary: List[StrictStr]
    attachments: Optional[List[_AttachmentBody]] = None


class _CardBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    content: StrictStr
    card: _CardSection
    pills: List[StrictStr]
    pillsActive: StrictBool = True

    @field_validator("pills")
    @classmethod
    def _exactly_edit_submit(cls, value: List[str]) -> List[str]:
        if tuple(value) != CARD_PILLS:
            raise ValueError(f"card pills must be exactly {list(CARD_PILLS)}, got {value}")
        return value


_Body = TypeVar("_Body", bound=BaseModel)


def _validate(model: Type[_Body], payload: Mapping[str, Any]) -> _Body:
    try:
        return model.model_validate(dict(payload))
    except ValidationError as exc:
        tag = payload.get("type")
        raise SchemaViolation(f"invalid {tag} response: {exc.errors(include_url=False)}") from exc


def _decode_text(payload: Mapping[str, Any]) -> TextTurn:
    body = _validate(_TextBody, payload)
    return TextTurn(content=body.content)


def _decode_pills(payload: Mapping[str, Any]) -> PillsTurn:
    body = _validate(_PillsBody, payload)
    return PillsTurn(content=body.content, pills=tuple(body.pills), active=body.pillsActive)


def _decode_card(payload: Mapping[str, Any]) -> CardTurn:
    body = _validate(_CardBody, payload)
    attachments = None
    if body.card.attachments is not None:
        attachments = tuple(
            CardAttachment(reference=item.url, kind=item.type, name=item.name)
            for item in body.card.attachments
        )
    return CardTurn(
        content=body.content,
        summary=tuple(body.card.summary),
        attachments=attachments,
        active=body.pillsActive,
    )


_DECODERS: Dict[str, Callable[[Mapping[str, Any]], AssistantTurn]] = {
    "text": _decode_text,
    "pills": _decode_pills,
    "card": _decode_card,
}


def decode_assistant_turn(payload: Any) -> AssistantTurn:
    """Classify a decoded payload by its ``type`` tag, or raise ``SchemaViolation``."""
    if not isinstance(payload, Mapping):
        raise SchemaViolation("assistant response must be an object")
    tag = payload.get("type")
    decoder = _DECODERS.get(tag) if isinstance(tag, str) else None
    if decoder is None:
        raise SchemaViolation(f"unknown assistant response type: {tag!r}")
    return decoder(payload)


def parse_model_reply(raw: Optional[str]) -> AssistantTurn:
    """Unwrap the ``{"response": ...}`` envelope returned by the model."""
    if not raw or not raw.strip():
        raise UpstreamFailure("No response from the model")
    try:
        envelope = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise UpstreamFailure(f"Model reply is not valid JSON: {exc}") from exc
    if not isinstance(envelope, Mapping) or "response" not in envelope:
        raise SchemaViolation("model reply is missing the 'response' envelope")
    return decode_assistant_turn(envelope["response"])


__all__ = [
    "ATTACHMENT_KINDS",
    "RESPONSE_FORMAT",
    "decode_assistant_turn",
    "parse_model_reply",
]
