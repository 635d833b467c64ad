"""
Tests for the Goal Wizard module.

Drives the wizard step by step through GoalWizardModule.handle with a fixed
"today" and an in-memory state store.

Covers:
- Happy path through every step (CREATE_GOAL side effect at CONFIRM)
- Per-step validation re-prompts
- "Don't know" deadline branch and the derived deadline
- Inline edits, cancel and exit at the confirmation step
- Submission outcome handling
- State persistence and corruption recovery
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from pathwise.core.module_context import ModuleContext
from pathwise.core.side_effects import SideEffectType
from pathwise.models.goal import GoalCategory, GoalPriority
from pathwise.modules.goal_models import GoalDraft
from pathwise.modules.goal_wizard import GoalWizardModule
from pathwise.modules.goal_wizard_handlers import (
    CANCELLED,
    DEADLINE_NEEDS_YEAR,
    DEADLINE_PAST,
    DEADLINE_REQUIRED,
    MONTHLY_AMOUNT_PROMPT,
    NAME_PROMPT,
    TARGET_INVALID,
)
from pathwise.modules.goal_wizard_state import WizardState, WizardStep
from pathwise.services.state_store import BoundedStateStore

TODAY = date(2026, 10, 17)


# =============================================================================
# Helpers
# =============================================================================


@pytest.fixture
def ctx() -> ModuleContext:
    return ModuleContext(session_id="s1", module_name="goal_wizard", today=lambda: TODAY)


async def _drive(wizard: GoalWizardModule, ctx: ModuleContext, messages: list[str]):
    responses = []
    for message in messages:
        responses.append(await wizard.handle(message, ctx))
    return responses


async def _state(wizard: GoalWizardModule, ctx: ModuleContext) -> WizardState:
    return await wizard.load_state(ctx.session_id)


async def _put_state(wizard: GoalWizardModule, ctx: ModuleContext, state: WizardState) -> None:
    await wizard.save_state(ctx.session_id, state)


def _draft(**overrides) -> GoalDraft:
    fields = dict(
        name="Japan trip",
        category=GoalCategory.TRAVEL,
        target_amount=Decimal("3000"),
        saved_amount=Decimal("500"),
        deadline=date(2026, 12, 31),
        monthly_savings_target=Decimal("1250"),
        priority=GoalPriority.HIGH,
    )
    fields.update(overrides)
    return GoalDraft(**fields)


# =============================================================================
# Happy path
# =============================================================================


class TestHappyPath:
    """A full dialogue ends in exactly one create request."""

    @pytest.mark.asyncio
    async def test_full_dialogue(self, wizard: GoalWizardModule, ctx: ModuleContext) -> None:
        messages = [
            "create a goal", "Japan trip", "travel", "3000", "500",
            "end of 2026", "yes", "high", "confirm",
        ]
        responses = await _drive(wizard, ctx, messages)

        assert [r.next_state for r in responses] == [
            WizardStep.NAME,
            WizardStep.CATEGORY,
            WizardStep.TARGET,
            WizardStep.SAVED,
            WizardStep.DEADLINE,
            WizardStep.MONTHLY,
            WizardStep.PRIORITY,
            WizardStep.CONFIRM,
            WizardStep.CONFIRM,
        ]

        effects = [e for r in responses for e in (r.side_effects or [])]
        assert len(effects) == 1
        effect = effects[0]
        assert effect.effect_type == SideEffectType.CREATE_GOAL
        assert effect.payload["targetAmount"] == 3000.0
        assert effect.payload["savedAmount"] == 500.0
        assert effect.payload["category"] == "TRAVEL"
        assert effect.payload["priority"] == "HIGH"
        assert effect.payload["deadline"] == "2026-12-31"
        assert effect.payload["monthlySavingsTarget"] == 1250.0

        # Stays in CONFIRM until the submission outcome is known
        assert (await _state(wizard, ctx)).step == WizardStep.CONFIRM
        await wizard.on_submit_result(ctx, succeeded=True)
        assert (await _state(wizard, ctx)).step == WizardStep.IDLE
        assert ctx.state == WizardStep.IDLE

    @pytest.mark.asyncio
    async def test_entry_prompt_asks_for_name(self, wizard: GoalWizardModule, ctx: ModuleContext) -> None:
        response = await wizard.handle("I want to save for a car", ctx)
        assert response.text == NAME_PROMPT
        assert await wizard.is_active(ctx)

    @pytest.mark.asyncio
    async def test_suggested_rate_offered_after_deadline(
        self, wizard: GoalWizardModule, ctx: ModuleContext,
    ) -> None:
        await _drive(wizard, ctx, ["new goal", "Japan trip", "travel", "3000", "500"])
        response = await wizard.handle("end of 2026", ctx)
        assert response.metadata["suggested_monthly_rate"] == "1250"
        assert "BD 1250.000" in response.text

    @pytest.mark.asyncio
    async def test_configured_currency_reaches_payload(
        self, state_store: BoundedStateStore, ctx: ModuleContext,
    ) -> None:
        wizard = GoalWizardModule(state_store, currency="USD")
        responses = await _drive(wizard, ctx, [
            "create a goal", "Japan trip", "travel", "3000", "500",
            "end of 2026", "yes", "high",
        ])
        assert "USD 1250.00" in responses[5].text
        assert "• Target: USD 3000.00" in responses[-1].text

        response = await wizard.handle("confirm", ctx)
        assert response.side_effects[0].payload["currency"] == "USD"


# =============================================================================
# Per-step validation
# =============================================================================


class TestStepValidation:
    @pytest.mark.asyncio
    async def test_name_suggestions_stay_in_name(self, wizard: GoalWizardModule, ctx: ModuleContext) -> None:
        await wizard.handle("create a goal", ctx)
        response = await wizard.handle("idk", ctx)
        assert response.next_state == WizardStep.NAME
        assert (await _state(wizard, ctx)).draft.name is None

    @pytest.mark.asyncio
    async def test_category_prompt_has_guess_and_buttons(
        self, wizard: GoalWizardModule, ctx: ModuleContext,
    ) -> None:
        await wizard.handle("create a goal", ctx)
        response = await wizard.handle("Buy a Car", ctx)
        assert response.metadata["category_guess"] == "VEHICLE"
        assert len(response.buttons) == len(GoalCategory)

    @pytest.mark.asyncio
    async def test_unmatched_category_does_not_mutate(
        self, wizard: GoalWizardModule, ctx: ModuleContext,
    ) -> None:
        """An unknown category re-prompts and leaves the draft untouched."""
        await _drive(wizard, ctx, ["create a goal", "New bike"])
        response = await wizard.handle("bicycle", ctx)

        assert response.next_state == WizardStep.CATEGORY
        assert "bicycle" in response.text
        state = await _state(wizard, ctx)
        assert state.step == WizardStep.CATEGORY
        assert state.draft.category is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("reply", ["0", "-10", "lots"])
    async def test_invalid_target(self, wizard: GoalWizardModule, ctx: ModuleContext, reply: str) -> None:
        await _drive(wizard, ctx, ["create a goal", "Trip", "travel"])
        response = await wizard.handle(reply, ctx)
        assert response.text == TARGET_INVALID
        assert (await _state(wizard, ctx)).draft.target_amount is None

    @pytest.mark.asyncio
    async def test_target_estimate_request(self, wizard: GoalWizardModule, ctx: ModuleContext) -> None:
        await _drive(wizard, ctx, ["create a goal", "Japan trip", "travel"])
        response = await wizard.handle("not sure, can you help?", ctx)
        assert response.next_state == WizardStep.TARGET
        assert "Japan" in response.text

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("saved", "accepted"),
        [("0", True), ("nothing", True), ("2999.999", True), ("3000", False), ("4000", False), ("-1", False)],
    )
    async def test_saved_accepted_iff_below_target(
        self, wizard: GoalWizardModule, ctx: ModuleContext, saved: str, accepted: bool,
    ) -> None:
        await _drive(wizard, ctx, ["create a goal", "Trip", "travel", "3000"])
        response = await wizard.handle(saved, ctx)
        state = await _state(wizard, ctx)
        if accepted:
            assert state.step == WizardStep.DEADLINE
            assert state.draft.saved_amount is not None
        else:
            assert response.next_state == WizardStep.SAVED
            assert state.draft.saved_amount is None

    @pytest.mark.asyncio
    async def test_deadline_outcomes(self, wizard: GoalWizardModule, ctx: ModuleContext) -> None:
        await _drive(wizard, ctx, ["create a goal", "Trip", "travel", "3000", "0"])
        assert (await wizard.handle("2026-01", ctx)).text == DEADLINE_PAST
        assert (await wizard.handle("June", ctx)).text == DEADLINE_NEEDS_YEAR
        response = await wizard.handle("someday", ctx)
        assert response.next_state == WizardStep.DEADLINE
        assert (await _state(wizard, ctx)).draft.deadline is None

    @pytest.mark.asyncio
    async def test_dont_know_deadline_moves_to_monthly(
        self, wizard: GoalWizardModule, ctx: ModuleContext,
    ) -> None:
        """Not knowing the deadline moves on to the monthly amount."""
        await _drive(wizard, ctx, ["create a goal", "Trip", "travel", "3000", "0"])
        response = await wizard.handle("idk", ctx)

        assert response.text == MONTHLY_AMOUNT_PROMPT
        state = await _state(wizard, ctx)
        assert state.step == WizardStep.MONTHLY
        assert state.draft.deadline is None

    @pytest.mark.asyncio
    async def test_monthly_skip_and_override(self, wizard: GoalWizardModule, ctx: ModuleContext) -> None:
        await _drive(wizard, ctx, ["create a goal", "Trip", "travel", "3000", "0", "2027-06"])
        response = await wizard.handle("400", ctx)
        assert response.next_state == WizardStep.PRIORITY
        assert (await _state(wizard, ctx)).draft.monthly_savings_target == Decimal("400")

    @pytest.mark.asyncio
    async def test_priority_without_deadline_or_rate_returns_to_deadline(
        self, wizard: GoalWizardModule, ctx: ModuleContext,
    ) -> None:
        await _drive(wizard, ctx, ["create a goal", "Trip", "travel", "3000", "0", "idk", "skip"])
        response = await wizard.handle("low", ctx)
        assert response.text == DEADLINE_REQUIRED
        assert (await _state(wizard, ctx)).step == WizardStep.DEADLINE


# =============================================================================
# Confirmation step
# =============================================================================


class TestConfirmStep:
    @pytest.mark.asyncio
    async def test_inline_edit_updates_only_target(
        self, wizard: GoalWizardModule, ctx: ModuleContext,
    ) -> None:
        """An edit changes only the named field and re-shows the summary."""
        await _put_state(wizard, ctx, WizardState(step=WizardStep.CONFIRM, draft=_draft()))
        response = await wizard.handle("target is 5000", ctx)

        assert response.next_state == WizardStep.CONFIRM
        assert "BD 5000.000" in response.text
        assert "Here's your goal summary" in response.text
        assert not response.side_effects
        state = await _state(wizard, ctx)
        assert state.draft == _draft(target_amount=Decimal("5000"))

    @pytest.mark.asyncio
    async def test_confirm_without_deadline_or_rate(
        self, wizard: GoalWizardModule, ctx: ModuleContext,
    ) -> None:
        """Confirming with no deadline and no rate goes back to the deadline step."""
        draft = _draft(deadline=None, monthly_savings_target=None)
        await _put_state(wizard, ctx, WizardState(step=WizardStep.CONFIRM, draft=draft))
        response = await wizard.handle("confirm", ctx)

        assert response.text == DEADLINE_REQUIRED
        assert response.next_state == WizardStep.DEADLINE
        assert not response.side_effects
        assert (await _state(wizard, ctx)).step == WizardStep.DEADLINE

    @pytest.mark.asyncio
    async def test_confirm_derives_deadline_from_rate(
        self, wizard: GoalWizardModule, ctx: ModuleContext,
    ) -> None:
        draft = _draft(deadline=None, monthly_savings_target=Decimal("1000"))
        await _put_state(wizard, ctx, WizardState(step=WizardStep.CONFIRM, draft=draft))
        response = await wizard.handle("comfirm", ctx)

        # 2500 remaining at 1000/month -> 3 months
        assert response.side_effects[0].payload["deadline"] == "2027-01-17"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("reply", ["confirm please", "yes confirm", "confirm it", "onfirm", "vonfirm"])
    async def test_loose_confirmations_submit(
        self, wizard: GoalWizardModule, ctx: ModuleContext, reply: str,
    ) -> None:
        await _put_state(wizard, ctx, WizardState(step=WizardStep.CONFIRM, draft=_draft()))
        response = await wizard.handle(reply, ctx)

        assert len(response.side_effects) == 1
        assert response.side_effects[0].effect_type == SideEffectType.CREATE_GOAL

    @pytest.mark.asyncio
    async def test_cancel_discards_draft(self, wizard: GoalWizardModule, ctx: ModuleContext) -> None:
        await _put_state(wizard, ctx, WizardState(step=WizardStep.CONFIRM, draft=_draft()))
        response = await wizard.handle("no", ctx)

        assert response.text == CANCELLED
        assert response.is_end_of_flow
        assert not await wizard.is_active(ctx)
        assert (await _state(wizard, ctx)).draft == GoalDraft()

    @pytest.mark.asyncio
    async def test_unrecognised_reply_shows_help(self, wizard: GoalWizardModule, ctx: ModuleContext) -> None:
        await _put_state(wizard, ctx, WizardState(step=WizardStep.CONFIRM, draft=_draft()))
        response = await wizard.handle("hmm", ctx)
        assert response.next_state == WizardStep.CONFIRM
        assert "target is 5000" in response.text

    @pytest.mark.asyncio
    async def test_failed_submission_keeps_draft(self, wizard: GoalWizardModule, ctx: ModuleContext) -> None:
        await _put_state(wizard, ctx, WizardState(step=WizardStep.CONFIRM, draft=_draft()))
        await wizard.handle("confirm", ctx)
        await wizard.on_submit_result(ctx, succeeded=False)

        state = await _state(wizard, ctx)
        assert state.step == WizardStep.CONFIRM
        assert state.draft == _draft()


# =============================================================================
# Exit and persistence
# =============================================================================


class TestExitAndPersistence:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("command", ["cancel", "stop", "quit", "exit"])
    async def test_exit_at_any_step(self, wizard: GoalWizardModule, ctx: ModuleContext, command: str) -> None:
        await _drive(wizard, ctx, ["create a goal", "Trip", "travel"])
        response = await wizard.handle(command, ctx)
        assert response.text == CANCELLED
        assert not await wizard.is_active(ctx)

    @pytest.mark.asyncio
    async def test_state_shared_across_module_instances(
        self, state_store: BoundedStateStore, ctx: ModuleContext,
    ) -> None:
        await GoalWizardModule(state_store).handle("create a goal", ctx)
        other = GoalWizardModule(state_store)
        await other.handle("Japan trip", ctx)
        assert (await other.load_state("s1")).draft.name == "Japan trip"

    @pytest.mark.asyncio
    async def test_corrupted_state_is_discarded(
        self, state_store: BoundedStateStore, wizard: GoalWizardModule,
    ) -> None:
        await state_store.set("goal_wizard:session:s9", {"step": "bogus"})
        state = await wizard.load_state("s9")
        assert state.step == WizardStep.IDLE
        assert await state_store.get("goal_wizard:session:s9") is None

    @pytest.mark.asyncio
    async def test_on_exit_forgets_state(self, wizard: GoalWizardModule, ctx: ModuleContext) -> None:
        await wizard.handle("create a goal", ctx)
        await wizard.on_exit(ctx)
        assert not await wizard.is_active(ctx)
