"""Error taxonomy for the dialogue core."""

from __future__ import annotations


class ValidationError(ValueError):
    """Raised when a user turn is rejected before it touches the session."""

    def __init__(self, reason: str, message: str) -> None:
        super().__init__(message)
        self.reason = reason
        self.message = message


class UpstreamFailure(RuntimeError):
    """The model call failed, timed out, or returned an unusable reply."""


class SchemaViolation(UpstreamFailure):
    """The model reply decoded but does not match any assistant turn shape."""


__all__ = ["ValidationError", "UpstreamFailure", "SchemaViolation"]
