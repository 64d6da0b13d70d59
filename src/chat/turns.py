"""Turn types stored in a sourcing session."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

CARD_PILLS: Tuple[str, str] = ("Edit", "Submit")


@dataclass(frozen=True)
class Document:
    name: str
    content: str
    kind: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Document":
        """Build from the front-end shape, which names the kind ``type``."""
        kind = data.get("kind", data.get("type"))
        fields = {"name": data.get("name"), "content": data.get("content"), "kind": kind}
        for key, value in fields.items():
            if not isinstance(value, str):
                raise ValueError(f"file {key} must be a string, got {type(value).__name__}")
        return cls(**fields)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "content": self.content, "type": self.kind}


@dataclass
class UserTurn:
    content: str
    images: List[str] = field(default_factory=list)
    documents: List[Document] = field(default_factory=list)
    role: str = field(default="user", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "role": self.role,
            "type": "user",
            "content": self.content,
            "images": list(self.images) or None,
            "files": [doc.to_dict() for doc in self.documents] or None,
        }


@dataclass
class TextTurn:
    content: str
    role: str = field(default="assistant", init=False)
    type: str = field(default="text", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"role": self.role, "type": self.type, "content": self.content}


@dataclass
class PillsTurn:
    content: str
    pills: Tuple[str, ...]
    active: bool = True
    role: str = field(default="assistant", init=False)
    type: str = field(default="pills", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "role": self.role,
            "type": self.type,
            "content": self.content,
            "pills": list(self.pills),
            "pillsActive": self.active,
        }


@dataclass(frozen=True)
class CardAttachment:
    reference: str
    kind: str
    name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"url": self.reference, "type": self.kind, "name": self.name}


@dataclass
class CardTurn:
    content: str
    summary: Tuple[str, ...]
    attachments: Optional[Tuple[CardAttachment, ...]] = None
    active: bool = True
    pills: Tuple[str, ...] = field(default=CARD_PILLS, init=False)
    role: str = field(default="assistant", init=False)
    type: str = field(default="card", init=False)

    def to_dict(self) -> Dict[str, Any]:
        attachments = None
        if self.attachments is not None:
            attachments = [item.to_dict() for item in self.attachments]
        return {
            "role": self.role,
            "type": self.type,
            "content": self.content,
            "card": {"summary": list(self.summary), "attachments": attachments},
            "pills": list(self.pills),
            "pillsActive": self.active,
        }


AssistantTurn = Union[TextTurn, PillsTurn, CardTurn]
Turn = Union[UserTurn, TextTurn, PillsTurn, CardTurn]


def has_options(turn: Turn) -> bool:
    """True for the assistant variants that carry a pill set."""
    return isinstance(turn, (PillsTurn, CardTurn))


def live_options(turn: Turn) -> bool:
    """True when the turn's pills should still be rendered as clickable."""
    return has_options(turn) and turn.active is not False  # type: ignore[union-attr]


__all__ = [
    "CARD_PILLS",
    "AssistantTurn",
    "CardAttachment",
    "CardTurn",
    "Document",
    "PillsTurn",
    "TextTurn",
    "Turn",
    "UserTurn",
    "has_options",
    "live_options",
]
