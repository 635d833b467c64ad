"""
Bounded state store with TTL for PathWise Coach.

Holds ephemeral per-session state (the goal wizard's step and draft) with:
- TTL (time-to-live) for automatic expiration
- Maximum size limit with LRU eviction
- Optional Redis mirror so state survives a worker restart
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any

from pathwise.services.redis_service import RedisService, get_redis_service

logger = logging.getLogger(__name__)


@dataclass
class StateEntry:
    """A state entry with TTL."""
    value: Any
    created_at: float
    accessed_at: float  # For LRU eviction
    ttl: int  # seconds

    def expired(self, now: float) -> bool:
        return now - self.created_at > self.ttl


class BoundedStateStore:
    """
    Bounded state store with TTL and optional Redis backend.

    Prevents memory exhaustion by:
    - TTL-based expiration
    - Maximum size limit
    - LRU eviction when full (by access time, not creation time)

    Values must be JSON-serializable when a Redis backend is configured.
    """

    DEFAULT_TTL = 3600  # 1 hour
    MAX_SIZE = 10000
    KEY_PREFIX = "pathwise:state:"

    def __init__(
        self,
        max_size: int = MAX_SIZE,
        default_ttl: int = DEFAULT_TTL,
        redis_service: RedisService | None = None,
    ) -> None:
        """
        Initialize bounded state store.

        Args:
            max_size: Maximum number of entries
            default_ttl: Default time-to-live in seconds
            redis_service: Redis mirror (memory-only if None)
        """
        self._store: OrderedDict[str, StateEntry] = OrderedDict()
        self._max_size = max_size
        self._default_ttl = default_ttl
        self._lock = asyncio.Lock()
        self._redis = redis_service

    def _redis_key(self, key: str) -> str:
        return f"{self.KEY_PREFIX}{key}"

    async def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        """
        Set a value with TTL.

        Args:
            key: Unique key
            value: Value to store
            ttl: Time-to-live in seconds (uses default if None)

        Returns:
            True if set successfully, False if full
        """
        async with self._lock:
            effective_ttl = ttl or self._default_ttl
            now = time.time()

            if self._redis is not None:
                await self._redis.set(
                    self._redis_key(key),
                    {"value": value, "created_at": now, "ttl": effective_ttl},
                    ttl=effective_ttl,
                )

            self._cleanup_expired(now)

            if len(self._store) >= self._max_size and key not in self._store:
                self._evict_lru()
                if len(self._store) >= self._max_size:
                    logger.warning("state_store_full key=%s", key)
                    return False

            self._store.pop(key, None)
            self._store[key] = StateEntry(
                value=value,
                created_at=now,
                accessed_at=now,
                ttl=effective_ttl,
            )
            return True

    async def get(self, key: str) -> Any | None:
        """
        Get a value if it exists and is not expired.

        Args:
            key: Unique key

        Returns:
            Value if found and not expired, None otherwise
        """
        async with self._lock:
            now = time.time()
            entry = self._store.get(key)

            if entry is not None:
                if entry.expired(now):
                    del self._store[key]
                    if self._redis is not None:
                        await self._redis.delete(self._redis_key(key))
                    return None
                entry.accessed_at = now
                self._store.move_to_end(key)
                return entry.value

            if self._redis is None:
                return None

            stored = await self._redis.get_json(self._redis_key(key))
            if not isinstance(stored, dict) or "value" not in stored:
                return None

            entry = StateEntry(
                value=stored["value"],
                created_at=float(stored.get("created_at", now)),
                accessed_at=now,
                ttl=int(stored.get("ttl", self._default_ttl)),
            )
            if entry.expired(now):
                await self._redis.delete(self._redis_key(key))
                return None

            if len(self._store) >= self._max_size:
                self._evict_lru()
            self._store[key] = entry
            return entry.value

    async def delete(self, key: str) -> bool:
        """
        Delete a key.

        Args:
            key: Unique key

        Returns:
            True if deleted, False if not found
        """
        async with self._lock:
            in_memory_deleted = self._store.pop(key, None) is not None
            redis_deleted = False
            if self._redis is not None:
                redis_deleted = await self._redis.delete(self._redis_key(key))
            return in_memory_deleted or redis_deleted

    async def exists(self, key: str) -> bool:
        """Check if key exists and is not expired."""
        return await self.get(key) is not None

    def _cleanup_expired(self, now: float) -> None:
        expired = [key for key, entry in self._store.items() if entry.expired(now)]
        for key in expired:
            del self._store[key]

    def _evict_lru(self) -> bool:
        """Evict the least recently used entry."""
        if not self._store:
            return False
        # First item is least recently used (get() moves hits to the end)
        lru_key = next(iter(self._store))
        del self._store[lru_key]
        return True

    async def clear(self) -> None:
        """Clear all entries."""
        async with self._lock:
            keys_to_delete = list(self._store.keys())
            self._store.clear()
            if self._redis is not None:
                for key in keys_to_delete:
                    await self._redis.delete(self._redis_key(key))

    async def size(self) -> int:
        """Get current number of live entries."""
        async with self._lock:
            self._cleanup_expired(time.time())
            return len(self._store)


# Global instance
_state_store: BoundedStateStore | None = None


def get_state_store(default_ttl: int = BoundedStateStore.DEFAULT_TTL) -> BoundedStateStore:
    """Get the global Redis-backed state store singleton."""
    global _state_store
    if _state_store is None:
        _state_store = BoundedStateStore(
            default_ttl=default_ttl,
            redis_service=get_redis_service(),
        )
    return _state_store
