"""Size and type checks for user-submitted text, images and documents."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence

from .turns import Document

MAX_MESSAGE_CHARS = 2000
# Measured on the base64 string, not the decoded bytes.
MAX_IMAGE_CHARS = int(1.5 * 1024 * 1024)
MAX_DOCUMENT_CHARS = 500 * 1024
IMAGE_PREFIX = "data:image/"
DOCUMENT_KINDS = ("txt", "csv")


@dataclass(frozen=True)
class InputCheck:
    valid: bool
    reason: Optional[str] = None
    error: Optional[str] = None


_OK = InputCheck(valid=True)


def _reject(reason: str, error: str) -> InputCheck:
    return InputCheck(valid=False, reason=reason, error=error)


def check_user_input(
    message: Any,
    images: Optional[Sequence[Any]] = None,
    documents: Optional[Sequence[Document]] = None,
) -> InputCheck:
    """Return the first failing check, in a fixed order, or a passing result."""
    if not isinstance(message, str) or not message.strip():
        return _reject("empty_message", "Message cannot be empty")
    if len(message) > MAX_MESSAGE_CHARS:
        return _reject(
            "message_too_long", f"Message is too long (max {MAX_MESSAGE_CHARS} characters)"
        )

    for image in images or []:
        if not isinstance(image, str) or not image.startswith(IMAGE_PREFIX):
            return _reject("invalid_image_format", "Invalid image format")
        if len(image) > MAX_IMAGE_CHARS:
            return _reject("image_too_large", "Image size too large (max 1.5MB encoded)")

    for document in documents or []:
        if document.kind not in DOCUMENT_KINDS:
            return _reject(
                "unsupported_document_type", "Unsupported file type (only txt and csv allowed)"
            )
        if len(document.content) > MAX_DOCUMENT_CHARS:
            return _reject("document_too_large", "File size too large (max 500KB)")

    return _OK


__all__ = [
    "DOCUMENT_KINDS",
    "IMAGE_PREFIX",
    "InputCheck",
    "MAX_DOCUMENT_CHARS",
    "MAX_IMAGE_CHARS",
    "MAX_MESSAGE_CHARS",
    "check_user_input",
]
