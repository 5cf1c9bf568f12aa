"""
Domain errors for AlphaClass.

Every error carries a stable ``kind`` string that the HTTP layer renders
unchanged, so clients can branch on it without parsing messages.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID


class AlphaClassError(Exception):
    """Base class for all domain errors."""

    kind: str = "error"
    retryable: bool = False

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.kind)
        self.message = message or self.kind

    def to_dict(self) -> dict[str, Any]:
        """Structured representation used in API error bodies."""
        return {"error": self.kind, "detail": self.message, "retryable": self.retryable}


class InvalidCredential(AlphaClassError):
    """Bearer credential missing, malformed, expired or badly signed."""

    kind = "invalid_credential"


class Unauthorized(AlphaClassError):
    """Principal attempted to read or mutate something it does not own."""

    kind = "unauthorized"


class InvalidResource(AlphaClassError):
    """Unrecognized resource kind or malformed filter."""

    kind = "invalid_resource"


class NotFound(AlphaClassError):
    """Referenced entity does not exist."""

    kind = "not_found"


class StoreUnavailable(AlphaClassError):
    """Durable store call failed."""

    kind = "store_unavailable"
    retryable = True


class InferenceUnavailable(AlphaClassError):
    """External assistant call failed.

    When raised from a chat turn, ``conversation_id`` names the thread the
    user's turn was persisted to so the caller can retry on it.
    """

    kind = "inference_unavailable"
    retryable = True

    def __init__(self, message: str = "", *, conversation_id: UUID | None = None) -> None:
        super().__init__(message)
        self.conversation_id = conversation_id

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        if self.conversation_id is not None:
            data["conversation_id"] = str(self.conversation_id)
        return data
