"""
HTTP transport to the remote PathWise backend.

Wraps a shared ``httpx.AsyncClient``. Every call forwards the caller's bearer
token verbatim and turns any failure (non-success status, connection error,
timeout, unreadable body) into a ``ServiceError`` carrying the message the
service provided, or a generic fallback.

No retries: one attempt per user action.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from pathwise.config.settings import Settings
from pathwise.infra.monitoring import track_remote_call
from pathwise.lib.errors import SERVICE_UNAVAILABLE, get_error_message
from pathwise.lib.exceptions import ServiceError

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "Something went wrong. Please try again."
TIMEOUT_FAILURE = "The PathWise service took too long to respond. Please try again."


def _error_message(response: httpx.Response) -> str:
    """Pull the service-provided message out of an error response."""
    try:
        body = response.json()
    except ValueError:
        return GENERIC_FAILURE
    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value
    return GENERIC_FAILURE


class BackendClient:
    """Authenticated JSON-over-HTTP access to the PathWise backend."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        """
        Args:
            client: HTTP client with ``base_url`` (and timeout) configured
        """
        self._client = client

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> BackendClient:
        """Build a client for ``settings.backend_url``.

        Args:
            settings: Application settings
            transport: Optional transport override (tests)

        Returns:
            BackendClient instance
        """
        client = httpx.AsyncClient(
            base_url=settings.backend_url,
            timeout=settings.http_timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )
        return cls(client)

    async def request(
        self,
        method: str,
        path: str,
        token: str | None,
        *,
        json: Any = None,
        operation: str = "request",
    ) -> Any:
        """Send one request and decode the JSON reply.

        Args:
            method: HTTP method
            path: Path relative to the backend base URL
            token: Bearer token of the user (forwarded verbatim)
            json: Optional JSON body
            operation: Metric label for the call

        Returns:
            Decoded JSON body, or None for empty replies

        Raises:
            ServiceError: On any transport or non-success failure
        """
        headers = {"Authorization": f"Bearer {token}"} if token else {}

        try:
            with track_remote_call(operation):
                response = await self._client.request(method, path, json=json, headers=headers)
        except httpx.TimeoutException as exc:
            logger.warning("backend_timeout operation=%s path=%s", operation, path)
            raise ServiceError(TIMEOUT_FAILURE) from exc
        except httpx.HTTPError as exc:
            logger.warning("backend_unreachable operation=%s path=%s error=%s", operation, path, exc)
            raise ServiceError(get_error_message(SERVICE_UNAVAILABLE)) from exc

        if response.is_error:
            message = _error_message(response)
            logger.warning(
                "backend_error operation=%s status=%s message=%s",
                operation,
                response.status_code,
                message,
            )
            raise ServiceError(message, status_code=response.status_code)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ServiceError(GENERIC_FAILURE, status_code=response.status_code) from exc

    async def aclose(self) -> None:
        await self._client.aclose()
