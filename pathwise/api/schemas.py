"""
Pydantic Schemas for the PathWise Coach REST API.

Defines the response envelope and the request/response bodies of the coach
endpoints.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

from pathwise.core.buttons import Button
from pathwise.lib.errors import build_error_response
from pathwise.services.transcript import DialogueMessage

# =============================================================================
# Response Envelope
# =============================================================================


def _meta() -> dict[str, Any]:
    return {"timestamp": datetime.now(UTC).isoformat()}


def success_response(data: Any) -> dict[str, Any]:
    """Wrap a payload in the success envelope."""
    return {"success": True, "data": data, "error": None, "meta": _meta()}


def error_response(
    code: str,
    message: str | None = None,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Wrap an error code in the failure envelope.

    Args:
        code: Error code constant from ``pathwise.lib.errors``
        message: Optional message overriding the registered one
        details: Optional extra details

    Returns:
        Envelope dict with ``success`` False and the structured error
    """
    return {
        "success": False,
        "data": None,
        "error": build_error_response(code, message=message, details=details),
        "meta": _meta(),
    }


# =============================================================================
# Common Schemas
# =============================================================================


class HealthCheckResponse(BaseModel):
    """Health check response."""

    status: str


# =============================================================================
# Coach Schemas
# =============================================================================


class SendMessageRequest(BaseModel):
    """Validated input for sending a message to the coach."""

    message: str = Field(..., min_length=1, max_length=4000)


class MessageResponse(BaseModel):
    """One transcript entry as returned to clients."""

    role: str
    content: str
    timestamp: datetime
    is_error: bool = False

    @classmethod
    def from_message(cls, message: DialogueMessage) -> MessageResponse:
        return cls(
            role=message.role.value,
            content=message.content,
            timestamp=message.timestamp,
            is_error=message.is_error,
        )


class QuickReplyResponse(BaseModel):
    text: str
    reply: str

    @classmethod
    def from_button(cls, button: Button) -> QuickReplyResponse:
        return cls(text=button.text, reply=button.reply)


class TranscriptResponse(BaseModel):
    """Full transcript of a session."""

    session_id: str
    messages: list[MessageResponse]
    wizard_step: str


class SendMessageResponse(BaseModel):
    """Entries produced by one submitted message."""

    session_id: str
    messages: list[MessageResponse]
    wizard_step: str
    quick_replies: list[QuickReplyResponse] = Field(default_factory=list)
    goals_changed: bool = False
    transcript: list[MessageResponse] = Field(default_factory=list)


__all__ = [
    "success_response",
    "error_response",
    "HealthCheckResponse",
    "SendMessageRequest",
    "MessageResponse",
    "QuickReplyResponse",
    "TranscriptResponse",
    "SendMessageResponse",
]
