"""Helpers around pills and the requirement summary card."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Literal, Optional

from .turns import CardTurn

Stage = Literal["assessing", "collecting", "summarizing"]


def pill_to_message(pill: str) -> str:
    """User text synthesized when a pill is clicked."""
    if pill == "Submit":
        return "Submit the requirements"
    return pill


def response_stage(content: str) -> Stage:
    lowered = content.lower()
    if "edit" in lowered or "submit" in lowered:
        return "summarizing"
    if "tell me more" in lowered or "what kind of" in lowered:
        return "assessing"
    return "collecting"


@dataclass
class SourcingRequirements:
    raw: List[str]
    product: Optional[str] = None
    quantity: Optional[str] = None
    customization: List[str] = field(default_factory=list)
    lead_time: Optional[str] = None
    incoterms: Optional[str] = None
    shipping: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["leadTime"] = data.pop("lead_time")
        return data


def extract_requirements(card: CardTurn) -> SourcingRequirements:
    """Parse ``Key: value`` bullets of a summary card into named fields."""
    requirements = SourcingRequirements(raw=list(card.summary))
    for point in card.summary:
        key, _, value = point.partition(":")
        value = value.strip()
        key = key.lower()
        if "product" in key:
            requirements.product = value
        elif "quantity" in key:
            requirements.quantity = value
        elif "custom" in key:
            requirements.customization.append(value)
        elif "lead time" in key:
            requirements.lead_time = value
        elif "incoterm" in key:
            requirements.incoterms = value
        elif "shipping" in key:
            requirements.shipping = value
    return requirements


__all__ = [
    "SourcingRequirements",
    "Stage",
    "extract_requirements",
    "pill_to_message",
    "response_stage",
]
