"""
Action dispatcher: turns goal actions into goal service calls.

Actions come from two places: a confirmed wizard draft (CREATE) and action
blocks embedded in free-form chat replies (CREATE, UPDATE, DELETE).

The dispatcher is the error boundary of the coach: every outcome, success or
failure, ends as an assistant entry in the session transcript and nothing is
raised to the caller.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from pathwise.infra.monitoring import record_goal_action
from pathwise.lib.exceptions import GoalNotFoundError, PathwiseException, ServiceError
from pathwise.models.goal import ActionType, GoalRecord, GoalRequest
from pathwise.services.goal_service import GoalServiceClient
from pathwise.services.transcript import DialogueMessage, Role, Transcript

logger = logging.getLogger(__name__)


class ActionKind(StrEnum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"

    @classmethod
    def from_action_type(cls, action_type: ActionType) -> ActionKind:
        return {
            ActionType.CREATE_GOAL: cls.CREATE,
            ActionType.UPDATE_GOAL: cls.UPDATE,
            ActionType.DELETE_GOAL: cls.DELETE,
        }[action_type]


_VERBS: dict[ActionKind, str] = {
    ActionKind.CREATE: "create",
    ActionKind.UPDATE: "update",
    ActionKind.DELETE: "delete",
}

# Payload keys that identify the target goal rather than change it
_ID_KEYS = ("id", "goalId")
_NAME_KEYS = ("goalName", "name")

GoalChangeListener = Callable[[ActionKind, GoalRecord | None], Awaitable[None] | None]


@dataclass(frozen=True)
class DispatchOutcome:
    """Result of one dispatched action.

    Attributes:
        kind: The action kind
        succeeded: Whether the goal service applied the action
        message: The transcript entry reporting the outcome
        goal: The affected goal when the service returned it
        not_found: True when the target could not be resolved
    """

    kind: ActionKind
    succeeded: bool
    message: DialogueMessage
    goal: GoalRecord | None = None
    not_found: bool = False


def resolve_goal(goals: list[GoalRecord], name: str) -> GoalRecord | None:
    """Find a goal by exact, then substring, case-insensitive name match.

    Args:
        goals: Known goals
        name: Name given by the user or the chat service

    Returns:
        The first matching goal, or None
    """
    needle = name.strip().casefold()
    if not needle:
        return None
    for goal in goals:
        if goal.name.casefold() == needle:
            return goal
    for goal in goals:
        if needle in goal.name.casefold():
            return goal
    return None


class ActionDispatcher:
    """Submits goal actions for one session and reports into its transcript."""

    def __init__(self, goal_service: GoalServiceClient, transcript: Transcript) -> None:
        self._goals = goal_service
        self._transcript = transcript
        self._listeners: list[GoalChangeListener] = []

    def add_listener(self, listener: GoalChangeListener) -> None:
        """Register a callback run after every successful action (e.g. goal list refresh)."""
        self._listeners.append(listener)

    async def dispatch(
        self,
        kind: ActionKind,
        payload: dict[str, Any],
        token: str | None,
    ) -> DispatchOutcome:
        """Submit an action and append the outcome to the transcript.

        Args:
            kind: CREATE, UPDATE or DELETE
            payload: camelCase goal fields; UPDATE/DELETE may name the target
                by ``id``/``goalId`` or ``goalName``/``name``
            token: Bearer token of the user

        Returns:
            DispatchOutcome (never raises)
        """
        try:
            if kind == ActionKind.CREATE:
                goal, text = await self._create(payload, token)
            elif kind == ActionKind.UPDATE:
                goal, text = await self._update(payload, token)
            else:
                goal, text = await self._delete(payload, token)
        except GoalNotFoundError as exc:
            record_goal_action(kind.value, "not_found")
            message = await self._transcript.append(
                Role.ASSISTANT,
                f"I couldn't find a goal matching '{exc.reference}'. "
                "Check the name on your dashboard and try again.",
                is_error=True,
            )
            return DispatchOutcome(kind, succeeded=False, message=message, not_found=True)
        except ServiceError as exc:
            return await self._failed(kind, exc.message)
        except PydanticValidationError as exc:
            logger.warning("goal_action_invalid kind=%s errors=%s", kind, exc.error_count())
            return await self._failed(kind, "some goal details were missing or invalid.")
        except PathwiseException as exc:
            logger.warning("goal_action_rejected kind=%s error=%s", kind, exc)
            return await self._failed(kind, str(exc))

        record_goal_action(kind.value, "success")
        logger.info("goal_action_succeeded kind=%s goal_id=%s", kind, goal.id if goal else None)
        message = await self._transcript.append(Role.ASSISTANT, text)
        await self._notify(kind, goal)
        return DispatchOutcome(kind, succeeded=True, message=message, goal=goal)

    # -----------------------------------------------------------------
    # Actions
    # -----------------------------------------------------------------

    async def _create(
        self,
        payload: dict[str, Any],
        token: str | None,
    ) -> tuple[GoalRecord | None, str]:
        request = GoalRequest.model_validate(payload)
        goal = await self._goals.create_goal(token, request)
        return goal, (
            f"✅ Goal created! **{request.name}** is now in your dashboard.\n\n"
            "Would you like tips on how to reach it faster?"
        )

    async def _update(
        self,
        payload: dict[str, Any],
        token: str | None,
    ) -> tuple[GoalRecord | None, str]:
        existing = await self._resolve(payload, token)
        changes = {
            key: value
            for key, value in payload.items()
            if key not in _ID_KEYS and key != "goalName"
        }
        if "goalName" not in payload and not any(key in payload for key in _ID_KEYS):
            # "name" identified the goal; it is not a rename
            changes.pop("name", None)
        body = existing.merged_with(changes)
        goal = await self._goals.update_goal(token, existing.id, body)
        name = goal.name if goal else body.get("name", existing.name)
        return goal or existing, f"✏️ Goal **{name}** updated."

    async def _delete(
        self,
        payload: dict[str, Any],
        token: str | None,
    ) -> tuple[GoalRecord | None, str]:
        existing = await self._resolve(payload, token)
        await self._goals.delete_goal(token, existing.id)
        return existing, f"🗑️ Goal **{existing.name}** deleted."

    async def _resolve(self, payload: dict[str, Any], token: str | None) -> GoalRecord:
        """Resolve the target goal by explicit id, else by name against the goal list."""
        goal_id = next((str(payload[key]) for key in _ID_KEYS if payload.get(key)), None)
        if goal_id is not None:
            try:
                return await self._goals.get_goal(token, goal_id)
            except ServiceError as exc:
                if exc.status_code == 404:
                    raise GoalNotFoundError(goal_id) from exc
                raise

        name = next((str(payload[key]) for key in _NAME_KEYS if payload.get(key)), "")
        if not name:
            raise GoalNotFoundError("(no goal named)")

        goal = resolve_goal(await self._goals.list_goals(token), name)
        if goal is None:
            raise GoalNotFoundError(name)
        return goal

    # -----------------------------------------------------------------
    # Reporting
    # -----------------------------------------------------------------

    async def _failed(self, kind: ActionKind, reason: str) -> DispatchOutcome:
        record_goal_action(kind.value, "failed")
        message = await self._transcript.append(
            Role.ASSISTANT,
            f"❌ Sorry, I couldn't {_VERBS[kind]} the goal: {reason}",
            is_error=True,
        )
        return DispatchOutcome(kind, succeeded=False, message=message)

    async def _notify(self, kind: ActionKind, goal: GoalRecord | None) -> None:
        for listener in self._listeners:
            try:
                result = listener(kind, goal)
                if inspect.isawaitable(result):
                    await result
            except Exception:  # Intentional catch-all: a listener must not undo a completed action
                logger.exception("goal_change_listener_failed kind=%s", kind)
