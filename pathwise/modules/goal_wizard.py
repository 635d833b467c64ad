"""
Goal Wizard Module for PathWise Coach.

A multi-step free-text dialogue that collects a savings goal (name,
category, target, saved amount, deadline, monthly rate, priority), lets the
user correct any field inline at the confirmation step, and hands the frozen
goal to the coach session as a CREATE_GOAL side effect.

Flow:
    IDLE -> NAME -> CATEGORY -> TARGET -> SAVED -> DEADLINE -> MONTHLY
         -> PRIORITY -> CONFIRM -> IDLE

Wizard state is ephemeral: it lives in the bounded state store under
``goal_wizard:session:<id>`` and expires after the configured TTL.
"""

from __future__ import annotations

import logging

from pathwise.core.module_context import ModuleContext
from pathwise.core.module_response import ModuleResponse
from pathwise.infra.monitoring import record_wizard_transition
from pathwise.modules.goal_intents import is_create_goal_intent, is_exit_command
from pathwise.modules.goal_models import CURRENCY, GoalDraft
from pathwise.modules.goal_wizard_handlers import CANCELLED, STEP_HANDLERS
from pathwise.modules.goal_wizard_state import WizardState, WizardStep
from pathwise.services.state_store import BoundedStateStore

logger = logging.getLogger(__name__)


class GoalWizardModule:
    """Goal-creation wizard implementing the Module protocol."""

    name = "goal_wizard"
    intents = ["goal.create"]

    def __init__(
        self,
        state_store: BoundedStateStore | None = None,
        ttl: int | None = None,
        currency: str = CURRENCY,
    ) -> None:
        """Initialize the Goal Wizard Module.

        Args:
            state_store: Store for per-session wizard state (memory-only if None)
            ttl: Seconds an idle wizard survives (store default if None)
            currency: ISO 4217 code every new draft is created in
        """
        self._store = state_store or BoundedStateStore()
        self._ttl = ttl
        self.currency = currency

    @staticmethod
    def _key(session_id: str) -> str:
        return f"goal_wizard:session:{session_id}"

    # -----------------------------------------------------------------
    # State persistence
    # -----------------------------------------------------------------

    async def load_state(self, session_id: str) -> WizardState:
        """Load the wizard state of a session (IDLE if none is stored)."""
        stored = await self._store.get(self._key(session_id))
        if stored is None:
            return WizardState()
        try:
            return WizardState.from_dict(stored)
        except (KeyError, TypeError, ValueError, ArithmeticError):
            logger.warning("goal_wizard_state_corrupted session=%s", session_id)
            await self._store.delete(self._key(session_id))
            return WizardState()

    async def save_state(self, session_id: str, state: WizardState) -> None:
        """Persist the wizard state; an IDLE wizard is simply forgotten."""
        if state.step == WizardStep.IDLE:
            await self._store.delete(self._key(session_id))
        else:
            await self._store.set(self._key(session_id), state.to_dict(), ttl=self._ttl)

    # -----------------------------------------------------------------
    # Module Protocol
    # -----------------------------------------------------------------

    @staticmethod
    def wants_to_start(message: str) -> bool:
        """Whether a free-chat message should open the wizard."""
        return is_create_goal_intent(message)

    async def is_active(self, ctx: ModuleContext) -> bool:
        state = await self.load_state(ctx.session_id)
        return state.is_active

    async def on_enter(self, ctx: ModuleContext) -> ModuleResponse:
        """Start the wizard with an empty draft.

        Args:
            ctx: Module context

        Returns:
            ModuleResponse asking for the goal name
        """
        state = WizardState(draft=GoalDraft(currency=self.currency))
        response = await STEP_HANDLERS[WizardStep.IDLE]("", ctx, state)
        await self._advance(ctx, state, response, WizardStep.IDLE)
        return response

    async def handle(self, message: str, ctx: ModuleContext) -> ModuleResponse:
        """Route a reply to the handler of the current step.

        Args:
            message: User's input
            ctx: Module context

        Returns:
            ModuleResponse with the next prompt
        """
        state = await self.load_state(ctx.session_id)
        if not state.is_active:
            return await self.on_enter(ctx)

        previous = state.step
        if is_exit_command(message):
            state.reset()
            response = ModuleResponse.end_flow(CANCELLED, WizardStep.IDLE)
        else:
            handler = STEP_HANDLERS[state.step]
            response = await handler(message, ctx, state)

        await self._advance(ctx, state, response, previous)
        return response

    async def on_submit_result(self, ctx: ModuleContext, succeeded: bool) -> None:
        """Settle a confirmed draft once the goal service has answered.

        On success the draft is discarded. On failure the wizard stays in
        CONFIRM with the draft intact so the user can retry or cancel.

        Args:
            ctx: Module context
            succeeded: Whether the goal was created
        """
        if not succeeded:
            logger.info("goal_wizard_submit_failed session=%s", ctx.session_id)
            return
        state = await self.load_state(ctx.session_id)
        previous = state.step
        state.reset()
        await self.save_state(ctx.session_id, state)
        ctx.state = state.step
        if previous != state.step:
            record_wizard_transition(previous.value, state.step.value)

    async def on_exit(self, ctx: ModuleContext) -> None:
        """Discard any wizard state of the session."""
        await self._store.delete(self._key(ctx.session_id))

    async def _advance(
        self,
        ctx: ModuleContext,
        state: WizardState,
        response: ModuleResponse,
        previous: WizardStep,
    ) -> None:
        if response.next_state is not None:
            state.step = WizardStep(response.next_state)
        await self.save_state(ctx.session_id, state)
        ctx.state = state.step
        ctx.update_interaction()

        if previous != state.step:
            record_wizard_transition(previous.value, state.step.value)
            logger.info(
                "goal_wizard_transition session=%s from=%s to=%s",
                ctx.session_id,
                previous.value,
                state.step.value,
            )
