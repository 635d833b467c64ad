"""Redis service for session state and transcripts."""

from __future__ import annotations

import dataclasses
import json
import logging
import os
import ssl
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

import redis.asyncio as redis

logger = logging.getLogger(__name__)

DEFAULT_REDIS_URL = "redis://localhost:6379/0"


class PathwiseJSONEncoder(json.JSONEncoder):
    """
    JSON encoder for PathWise values:
    - dataclasses → dict via dataclasses.asdict()
    - Decimal → str (exact, no float rounding)
    - datetime/date → .isoformat()
    - Enum → .value
    - set → sorted list
    """

    def default(self, obj: Any) -> Any:
        """Convert non-serializable objects to JSON-serializable types."""
        if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
            return dataclasses.asdict(obj)

        if isinstance(obj, Decimal):
            return str(obj)

        if isinstance(obj, (datetime, date)):
            return obj.isoformat()

        if isinstance(obj, Enum):
            return obj.value

        if isinstance(obj, set):
            return sorted(obj)

        return super().default(obj)


class RedisService:
    """Redis service with a soft failure mode.

    When Redis cannot be reached every operation degrades to a no-op
    (``get`` returns None, writes return False) so callers fall back to their
    in-memory copies.
    """

    def __init__(self, redis_url: str | None = None) -> None:
        """Initialize (the connection is opened lazily).

        Args:
            redis_url: Redis URL (defaults to ``REDIS_URL``)
        """
        self._redis_url = redis_url or os.environ.get("REDIS_URL", DEFAULT_REDIS_URL)
        self._client: redis.Redis | None = None
        self._unavailable = False

    @staticmethod
    def _tls_kwargs(redis_url: str) -> dict[str, Any]:
        """Build TLS keyword arguments when using rediss:// URLs."""
        if not redis_url.startswith("rediss://"):
            return {}

        cert_path = os.environ.get("REDIS_TLS_CERT_PATH")
        if cert_path:
            ssl_ctx = ssl.create_default_context(cafile=cert_path)
        else:
            ssl_ctx = ssl.create_default_context()
        ssl_ctx.check_hostname = True
        ssl_ctx.verify_mode = ssl.CERT_REQUIRED
        return {"ssl": ssl_ctx}

    async def _ensure_client(self) -> redis.Redis | None:
        """Get or create the async client; None once Redis proved unreachable."""
        if self._client is None and not self._unavailable:
            try:
                client = redis.from_url(  # type: ignore[no-untyped-call]
                    self._redis_url,
                    decode_responses=True,
                    **self._tls_kwargs(self._redis_url),
                )
                await client.ping()
                self._client = client
            except (redis.ConnectionError, redis.TimeoutError, OSError) as exc:
                logger.warning("redis_unavailable_using_memory url=%s error=%s", self._redis_url, exc)
                self._unavailable = True
        return self._client

    @property
    def available(self) -> bool:
        return self._client is not None

    async def get(self, key: str) -> str | None:
        """Get raw JSON value by key."""
        client = await self._ensure_client()
        if client is None:
            return None
        result = await client.get(key)
        return str(result) if result is not None else None

    async def get_json(self, key: str) -> Any | None:
        """Get and decode a JSON value; corrupted entries are deleted."""
        raw = await self.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("redis_corrupted_entry key=%s", key)
            await self.delete(key)
            return None

    async def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        """Set key to the JSON encoding of value, with optional TTL (seconds)."""
        client = await self._ensure_client()
        if client is None:
            return False
        payload = json.dumps(value, cls=PathwiseJSONEncoder)
        if ttl:
            return bool(await client.setex(key, ttl, payload))
        return bool(await client.set(key, payload))

    async def delete(self, key: str) -> bool:
        """Delete key."""
        client = await self._ensure_client()
        if client is None:
            return False
        return bool(await client.delete(key))

    async def close(self) -> None:
        """Close the underlying connection pool."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None


# Singleton instance
_redis_service: RedisService | None = None


def get_redis_service() -> RedisService:
    """Get Redis service singleton."""
    global _redis_service
    if _redis_service is None:
        _redis_service = RedisService()
    return _redis_service
