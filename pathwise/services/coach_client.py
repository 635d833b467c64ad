"""
Client for the remote AI coach endpoints (``/api/ai``).
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from pathwise.lib.exceptions import ServiceError
from pathwise.models.goal import ChatReply
from pathwise.services.backend import GENERIC_FAILURE, BackendClient

logger = logging.getLogger(__name__)


def _reply(payload: Any) -> ChatReply:
    try:
        return ChatReply.model_validate(payload)
    except PydanticValidationError as exc:
        logger.warning("coach_unexpected_payload error=%s", exc)
        raise ServiceError(GENERIC_FAILURE) from exc


class CoachClient:
    """Free-form chat, weekly advice and context events."""

    def __init__(self, backend: BackendClient) -> None:
        self._backend = backend

    async def chat(self, token: str | None, message: str) -> ChatReply:
        """``POST /api/ai/chat``: ``{message}`` -> ``{message, timestamp}``."""
        payload = await self._backend.request(
            "POST", "/api/ai/chat", token, json={"message": message}, operation="chat"
        )
        return _reply(payload)

    async def weekly_advice(self, token: str | None) -> ChatReply:
        """``GET /api/ai/advice``: weekly check-in tips."""
        payload = await self._backend.request("GET", "/api/ai/advice", token, operation="advice")
        return _reply(payload)

    async def send_context_event(
        self,
        token: str | None,
        event: str,
        details: dict[str, Any] | None = None,
    ) -> bool:
        """``POST /api/ai/context-event``, fire and forget.

        Failures are logged and swallowed.

        Args:
            token: Bearer token
            event: Event name (e.g. ``goal_created``)
            details: Extra event fields

        Returns:
            True if the service accepted the event
        """
        try:
            await self._backend.request(
                "POST",
                "/api/ai/context-event",
                token,
                json={"event": event, **(details or {})},
                operation="context_event",
            )
        except ServiceError as exc:
            logger.warning("context_event_failed event=%s error=%s", event, exc.message)
            return False
        return True
