"""
Client for the remote goal service (``/api/goals``).

The remote service is authoritative for goals; this client keeps no copy.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from pathwise.lib.exceptions import ServiceError
from pathwise.models.goal import GoalRecord, GoalRequest, ProjectionRequest, SimulationRequest
from pathwise.services.backend import GENERIC_FAILURE, BackendClient

logger = logging.getLogger(__name__)


def _record(payload: Any) -> GoalRecord:
    try:
        return GoalRecord.model_validate(payload)
    except PydanticValidationError as exc:
        logger.warning("goal_service_unexpected_payload error=%s", exc)
        raise ServiceError(GENERIC_FAILURE) from exc


class GoalServiceClient:
    """CRUD, projection and simulation calls against the goal service."""

    def __init__(self, backend: BackendClient) -> None:
        self._backend = backend

    async def list_goals(self, token: str | None) -> list[GoalRecord]:
        """``GET /api/goals``: all goals of the user."""
        payload = await self._backend.request("GET", "/api/goals", token, operation="list_goals")
        if isinstance(payload, dict):
            payload = payload.get("goals", [])
        return [_record(item) for item in payload or []]

    async def get_goal(self, token: str | None, goal_id: str) -> GoalRecord:
        """``GET /api/goals/{id}``."""
        payload = await self._backend.request(
            "GET", f"/api/goals/{goal_id}", token, operation="get_goal"
        )
        return _record(payload)

    async def create_goal(
        self,
        token: str | None,
        goal: GoalRequest | dict[str, Any],
    ) -> GoalRecord | None:
        """``POST /api/goals``.

        Args:
            token: Bearer token
            goal: Frozen goal request, or an already-wire-shaped dict

        Returns:
            The created goal, or None if the service returned no body
        """
        body = goal.to_wire() if isinstance(goal, GoalRequest) else goal
        payload = await self._backend.request(
            "POST", "/api/goals", token, json=body, operation="create_goal"
        )
        return _record(payload) if payload else None

    async def update_goal(
        self,
        token: str | None,
        goal_id: str,
        body: dict[str, Any],
    ) -> GoalRecord | None:
        """``PUT /api/goals/{id}`` with a full camelCase body."""
        payload = await self._backend.request(
            "PUT", f"/api/goals/{goal_id}", token, json=body, operation="update_goal"
        )
        return _record(payload) if payload else None

    async def delete_goal(self, token: str | None, goal_id: str) -> None:
        """``DELETE /api/goals/{id}``."""
        await self._backend.request(
            "DELETE", f"/api/goals/{goal_id}", token, operation="delete_goal"
        )

    async def projection(
        self,
        token: str | None,
        goal_id: str,
        request: ProjectionRequest,
    ) -> dict[str, Any]:
        """``POST /api/goals/{id}/projection``: projection for a monthly savings rate."""
        payload = await self._backend.request(
            "POST",
            f"/api/goals/{goal_id}/projection",
            token,
            json=request.to_wire(),
            operation="projection",
        )
        return payload or {}

    async def simulate(self, token: str | None, request: SimulationRequest) -> dict[str, Any]:
        """``POST /api/goals/simulate``: what-if spending cut simulation."""
        payload = await self._backend.request(
            "POST",
            "/api/goals/simulate",
            token,
            json=request.to_wire(),
            operation="simulate",
        )
        return payload or {}
