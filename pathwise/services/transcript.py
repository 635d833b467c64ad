"""
Dialogue transcript of a coach session.

The transcript is an append-only list of messages, capped to the most recent
entries, and persisted through an injected ``TranscriptStore`` keyed by
session. It is loaded once when the session is built and written back after
every mutation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, Protocol

from pathwise.services.redis_service import RedisService

logger = logging.getLogger(__name__)

DEFAULT_TRANSCRIPT_LIMIT = 60


class Role(StrEnum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class DialogueMessage:
    """One transcript entry."""

    role: Role
    content: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    is_error: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "role": self.role.value,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
            "is_error": self.is_error,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DialogueMessage:
        return cls(
            role=Role(data["role"]),
            content=data["content"],
            timestamp=datetime.fromisoformat(data["timestamp"]),
            is_error=bool(data.get("is_error", False)),
        )


# =============================================================================
# Stores
# =============================================================================

class TranscriptStore(Protocol):
    """Persistence capability for transcripts."""

    async def load(self, session_id: str) -> list[DialogueMessage]:
        ...

    async def save(self, session_id: str, messages: list[DialogueMessage]) -> None:
        ...

    async def clear(self, session_id: str) -> None:
        ...


class InMemoryTranscriptStore:
    """Process-local transcript store."""

    def __init__(self) -> None:
        self._data: dict[str, list[DialogueMessage]] = {}

    async def load(self, session_id: str) -> list[DialogueMessage]:
        return list(self._data.get(session_id, []))

    async def save(self, session_id: str, messages: list[DialogueMessage]) -> None:
        self._data[session_id] = list(messages)

    async def clear(self, session_id: str) -> None:
        self._data.pop(session_id, None)


class RedisTranscriptStore:
    """Redis-backed transcript store with an in-memory fallback.

    Writes go to both Redis and memory; reads prefer Redis and fall back to
    memory when Redis is unavailable.
    """

    KEY_PREFIX = "pathwise:transcript:"

    def __init__(self, redis_service: RedisService, ttl: int | None = None) -> None:
        """
        Args:
            redis_service: Redis service
            ttl: Optional expiry of stored transcripts, in seconds
        """
        self._redis = redis_service
        self._ttl = ttl
        self._fallback = InMemoryTranscriptStore()

    def _key(self, session_id: str) -> str:
        return f"{self.KEY_PREFIX}{session_id}"

    async def load(self, session_id: str) -> list[DialogueMessage]:
        stored = await self._redis.get_json(self._key(session_id))
        if not isinstance(stored, list):
            return await self._fallback.load(session_id)
        messages: list[DialogueMessage] = []
        for item in stored:
            try:
                messages.append(DialogueMessage.from_dict(item))
            except (KeyError, TypeError, ValueError):
                logger.warning("transcript_entry_skipped session=%s", session_id)
        return messages

    async def save(self, session_id: str, messages: list[DialogueMessage]) -> None:
        await self._fallback.save(session_id, messages)
        await self._redis.set(
            self._key(session_id),
            [message.to_dict() for message in messages],
            ttl=self._ttl,
        )

    async def clear(self, session_id: str) -> None:
        await self._fallback.clear(session_id)
        await self._redis.delete(self._key(session_id))


# =============================================================================
# Transcript
# =============================================================================

class Transcript:
    """The capped message list of one session."""

    def __init__(
        self,
        session_id: str,
        store: TranscriptStore,
        messages: list[DialogueMessage] | None = None,
        limit: int = DEFAULT_TRANSCRIPT_LIMIT,
    ) -> None:
        self.session_id = session_id
        self._store = store
        self._limit = limit
        self._messages: list[DialogueMessage] = list(messages or [])[-limit:]

    @classmethod
    async def load(
        cls,
        session_id: str,
        store: TranscriptStore,
        limit: int = DEFAULT_TRANSCRIPT_LIMIT,
    ) -> Transcript:
        """Load a session's transcript from the store."""
        return cls(session_id, store, await store.load(session_id), limit)

    @property
    def messages(self) -> list[DialogueMessage]:
        return list(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    async def append(
        self,
        role: Role,
        content: str,
        is_error: bool = False,
    ) -> DialogueMessage:
        """Append a message, drop the oldest beyond the cap, and persist.

        Args:
            role: Author of the message
            content: Message text
            is_error: Whether the message reports a failure

        Returns:
            The appended message
        """
        message = DialogueMessage(role=role, content=content, is_error=is_error)
        self._messages.append(message)
        if len(self._messages) > self._limit:
            del self._messages[: len(self._messages) - self._limit]
        await self._store.save(self.session_id, self._messages)
        return message

    async def clear(self) -> None:
        self._messages.clear()
        await self._store.clear(self.session_id)
