"""
Side Effects for PathWise Coach.

Side effects are actions requested by module responses that the coach
session executes after the module has answered. The goal wizard never talks
to the network itself: a confirmed draft comes back as a CREATE_GOAL side
effect which the action dispatcher submits to the remote goal service.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class SideEffectType(Enum):
    """Types of side effects that can be executed."""

    # Goal service operations
    CREATE_GOAL = "create_goal"
    UPDATE_GOAL = "update_goal"
    DELETE_GOAL = "delete_goal"

    # Conversation bookkeeping
    CONTEXT_EVENT = "context_event"


@dataclass(frozen=True)
class SideEffect:
    """A side effect to be executed by the coach session.

    Attributes:
        effect_type: The type of side effect
        payload: Data required to execute the effect
        id: Unique identifier for this effect
        created_at: When the effect was created
    """

    effect_type: SideEffectType
    payload: dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def create_goal(cls, goal_payload: dict[str, Any]) -> SideEffect:
        """Create a create_goal side effect.

        Args:
            goal_payload: Wire payload for ``POST /api/goals``

        Returns:
            SideEffect instance
        """
        return cls(effect_type=SideEffectType.CREATE_GOAL, payload=goal_payload)

    @classmethod
    def update_goal(cls, goal_payload: dict[str, Any]) -> SideEffect:
        """Create an update_goal side effect."""
        return cls(effect_type=SideEffectType.UPDATE_GOAL, payload=goal_payload)

    @classmethod
    def delete_goal(cls, goal_payload: dict[str, Any]) -> SideEffect:
        """Create a delete_goal side effect."""
        return cls(effect_type=SideEffectType.DELETE_GOAL, payload=goal_payload)

    @classmethod
    def context_event(cls, event: str, **details: Any) -> SideEffect:
        """Create a context_event side effect.

        Args:
            event: Event name sent to ``POST /api/ai/context-event``
            details: Extra event fields

        Returns:
            SideEffect instance
        """
        return cls(
            effect_type=SideEffectType.CONTEXT_EVENT,
            payload={"event": event, **details},
        )
