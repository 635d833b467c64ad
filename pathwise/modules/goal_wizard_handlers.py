"""
Goal Wizard Step Handlers.

Contains one handler per wizard step. Each handler validates the user's reply
for its step, mutates the draft when the reply is valid, and returns the next
prompt with the step to move to. Invalid replies re-prompt in place and never
raise.

Reference: goal_wizard.py (main module)
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from decimal import Decimal

from pathwise.core.module_context import ModuleContext
from pathwise.core.module_response import ModuleResponse
from pathwise.core.side_effects import SideEffect
from pathwise.models.goal import GoalCategory, GoalPriority
from pathwise.modules.goal_edits import EDIT_EXAMPLES, apply_inline_edits
from pathwise.modules.goal_intents import (
    is_affirmative,
    is_cancel,
    is_confirm,
    is_dont_know,
    is_estimate_request,
    is_nothing,
    is_skip,
    is_suggestion_request,
)
from pathwise.modules.goal_models import (
    CATEGORY_LABELS,
    build_summary,
    category_label,
    format_amount,
)
from pathwise.modules.goal_parsing import (
    DateParseStatus,
    derive_deadline,
    guess_category,
    parse_amount,
    parse_category,
    parse_deadline,
    parse_priority,
    suggested_monthly_rate,
)
from pathwise.modules.goal_wizard_state import WizardState, WizardStep

StepHandler = Callable[[str, ModuleContext, WizardState], Awaitable[ModuleResponse]]


# =============================================================================
# Prompts
# =============================================================================

NAME_PROMPT = (
    "Let's set up your new goal! 🎯\n\n"
    "What would you like to name it? "
    "For example: 'Buy a Car', 'Travel to Japan', 'Emergency Fund'"
)

GOAL_IDEAS = (
    "Here are some popular goals to inspire you:\n\n"
    "🚗 Car: Toyota Camry (~BD 8,000), Honda Accord (~BD 9,500), Tesla Model 3 (~BD 14,000)\n"
    "🏠 House: apartment down payment (~BD 20,000-40,000)\n"
    "✈️ Travel: Japan (~BD 1,500), Europe (~BD 2,500)\n"
    "📚 Education: Masters degree (~BD 5,000-15,000)\n"
    "🛡️ Emergency Fund: 6 months of expenses (~BD 3,000-6,000)\n\n"
    "Which one appeals to you? Or tell me your own idea!"
)

TARGET_PROMPT = (
    "How much do you need to save in total? (in BHD)\n"
    "If you're not sure, I can help you estimate."
)
TARGET_INVALID = "Please enter a valid amount in BHD, for example: **5000**"

SAVED_INVALID = "Please enter how much you've saved so far, for example: **500** (or 0)."

DEADLINE_PROMPT = (
    "By when do you want to reach this goal? 📅\n"
    "You can say things like '2027-06', '06/2027', 'June 2027', 'end of 2028' or 'Q3 2029'.\n"
    "Not sure? Just say 'I don't know'."
)
DEADLINE_PAST = "That date is in the past! Please give me a future date."
DEADLINE_NEEDS_YEAR = "Which year do you mean? For example: 'June 2027' or 'end of 2028'."
DEADLINE_UNRECOGNIZED = (
    "I couldn't understand that date. Try formats like "
    "'2027-06', '06/2027', 'June 2027', 'end of 2028' or 'Q3 2029'."
)
DEADLINE_REQUIRED = (
    "I need a deadline to create this goal, since there's no monthly amount "
    "to work it out from.\n\n"
    "By when do you want to reach it? For example: 'June 2027' or 'end of 2028'."
)

MONTHLY_AMOUNT_PROMPT = (
    "No problem, we'll work out the deadline from how much you save each month.\n\n"
    "How much can you put aside per month? (in BHD) Or say 'skip'."
)
MONTHLY_INVALID = "Please enter a positive monthly amount in BHD, or 'skip'."

PRIORITY_PROMPT = (
    "What's the priority of this goal?\n\n"
    "- **HIGH**: urgent and important\n"
    "- **MEDIUM**: important but not urgent\n"
    "- **LOW**: nice to have someday"
)

CANCELLED = "No problem! Goal was not created. Feel free to ask me anything else. 😊"

CONFIRM_HELP = (
    "I didn't catch a change there. Reply **confirm** to create the goal, "
    "**cancel** to discard it, or edit a field, for example:\n"
) + EDIT_EXAMPLES

_PRICE_HINTS: dict[GoalCategory, str] = {
    GoalCategory.VEHICLE: (
        "Here are typical car prices in Bahrain:\n\n"
        "🚗 Toyota Camry: ~BD 8,000\n"
        "🚗 Honda Accord: ~BD 9,500\n"
        "🚗 Tesla Model 3: ~BD 14,000\n"
        "🚗 Tesla Model Y: ~BD 17,000\n\n"
        "How much would you like to save?"
    ),
    GoalCategory.PROPERTY: (
        "Typical down payments in Bahrain:\n\n"
        "🏠 Studio apartment: ~BD 15,000\n"
        "🏠 1-bedroom: ~BD 20,000\n"
        "🏠 2-bedroom: ~BD 30,000\n\n"
        "How much are you targeting?"
    ),
    GoalCategory.TRAVEL: (
        "Typical travel budgets from Bahrain:\n\n"
        "✈️ Weekend Gulf trip: ~BD 500\n"
        "✈️ Japan: ~BD 1,500\n"
        "✈️ Europe: ~BD 2,500\n\n"
        "How much would you like to save?"
    ),
    GoalCategory.EDUCATION: (
        "Typical education costs:\n\n"
        "📚 Professional certificate: ~BD 1,000-3,000\n"
        "📚 Masters degree: ~BD 5,000-15,000\n\n"
        "How much would you like to save?"
    ),
    GoalCategory.EMERGENCY: (
        "A common rule of thumb is 3 to 6 months of expenses "
        "(often ~BD 3,000-6,000).\n\n"
        "How much would you like to set aside?"
    ),
}


def category_prompt(goal_name: str) -> ModuleResponse:
    """Prompt for the category, with a guess from the goal name and one button per category."""
    guess = guess_category(goal_name)
    choices = ", ".join(CATEGORY_LABELS.values())
    response = ModuleResponse(
        text=(
            f"Great choice, **{goal_name}**! 💪\n\n"
            f"Which category fits best? It looks like **{category_label(guess)}** to me.\n"
            f"Choose one of: {choices}."
        ),
        next_state=WizardStep.CATEGORY,
        metadata={"category_guess": guess.value},
    )
    for label in CATEGORY_LABELS.values():
        response.add_button(label)
    return response


def priority_prompt(prefix: str = "") -> ModuleResponse:
    response = ModuleResponse(text=prefix + PRIORITY_PROMPT, next_state=WizardStep.PRIORITY)
    for priority in GoalPriority:
        response.add_button(priority.value)
    return response


def confirm_prompt(state: WizardState, prefix: str = "") -> ModuleResponse:
    response = ModuleResponse(
        text=prefix + build_summary(state.draft),
        next_state=WizardStep.CONFIRM,
    )
    response.add_button("Confirm", "confirm")
    response.add_button("Cancel", "cancel")
    return response


def deadline_required() -> ModuleResponse:
    return ModuleResponse(text=DEADLINE_REQUIRED, next_state=WizardStep.DEADLINE)


def _price_hint(goal_name: str | None) -> str:
    return _PRICE_HINTS.get(
        guess_category(goal_name or ""),
        "How much would you like to save in total? (enter the amount in BHD)",
    )


# =============================================================================
# Step Handlers
# =============================================================================

async def handle_idle(message: str, ctx: ModuleContext, state: WizardState) -> ModuleResponse:
    """Handle IDLE - the wizard is being entered; start with a fresh draft."""
    state.reset()
    return ModuleResponse.transition(NAME_PROMPT, WizardStep.NAME)


async def handle_name(message: str, ctx: ModuleContext, state: WizardState) -> ModuleResponse:
    """Handle NAME - any non-empty reply becomes the goal name.

    Args:
        message: User's message
        ctx: Module context
        state: Wizard state of this session

    Returns:
        ModuleResponse
    """
    name = message.strip()
    if not name:
        return ModuleResponse.transition(NAME_PROMPT, WizardStep.NAME)

    if is_suggestion_request(name):
        return ModuleResponse.transition(GOAL_IDEAS, WizardStep.NAME)

    state.draft.name = name
    return category_prompt(name)


async def handle_category(message: str, ctx: ModuleContext, state: WizardState) -> ModuleResponse:
    """Handle CATEGORY - exact match against category codes and labels."""
    category = parse_category(message)
    if category is None:
        choices = ", ".join(CATEGORY_LABELS.values())
        response = ModuleResponse.transition(
            f"I don't recognise '{message.strip()}' as a category. "
            f"Please choose one of: {choices}.",
            WizardStep.CATEGORY,
        )
        for label in CATEGORY_LABELS.values():
            response.add_button(label)
        return response

    state.draft.category = category
    return ModuleResponse.transition(
        f"{category_label(category)} it is! ✅\n\n{TARGET_PROMPT}",
        WizardStep.TARGET,
    )


async def handle_target(message: str, ctx: ModuleContext, state: WizardState) -> ModuleResponse:
    """Handle TARGET - a positive amount, or a request for price estimates."""
    amount = parse_amount(message)
    if amount is None:
        if is_estimate_request(message):
            return ModuleResponse.transition(_price_hint(state.draft.name), WizardStep.TARGET)
        return ModuleResponse.transition(TARGET_INVALID, WizardStep.TARGET)

    if amount <= 0:
        return ModuleResponse.transition(TARGET_INVALID, WizardStep.TARGET)

    state.draft.target_amount = amount
    return ModuleResponse.transition(
        f"{format_amount(amount, state.draft.currency)}, noted! 💰\n\n"
        "How much have you already saved towards it? (enter 0 if you're starting fresh)",
        WizardStep.SAVED,
    )


async def handle_saved(message: str, ctx: ModuleContext, state: WizardState) -> ModuleResponse:
    """Handle SAVED - a non-negative amount strictly below the target.

    Args:
        message: User's message
        ctx: Module context
        state: Wizard state of this session

    Returns:
        ModuleResponse
    """
    amount = Decimal("0") if is_nothing(message) else parse_amount(message)
    if amount is None or amount < 0:
        return ModuleResponse.transition(SAVED_INVALID, WizardStep.SAVED)

    target = state.draft.target_amount
    if target is None:
        # Draft lost its target (e.g. restored from an older session)
        return ModuleResponse.transition(TARGET_PROMPT, WizardStep.TARGET)

    if amount >= target:
        return ModuleResponse.transition(
            f"You've saved {format_amount(amount, state.draft.currency)}, but your target is "
            f"{format_amount(target, state.draft.currency)}. The saved amount has to be less than the "
            "target. How much have you saved so far?",
            WizardStep.SAVED,
        )

    state.draft.saved_amount = amount
    return ModuleResponse.transition(DEADLINE_PROMPT, WizardStep.DEADLINE)


async def handle_deadline(message: str, ctx: ModuleContext, state: WizardState) -> ModuleResponse:
    """Handle DEADLINE - parse a date phrase, or skip on "don't know"."""
    if is_dont_know(message):
        return ModuleResponse.transition(MONTHLY_AMOUNT_PROMPT, WizardStep.MONTHLY)

    today = ctx.today()
    result = parse_deadline(message, today)

    if result.status == DateParseStatus.PAST:
        return ModuleResponse.transition(DEADLINE_PAST, WizardStep.DEADLINE)
    if result.status == DateParseStatus.NEEDS_QUALIFIER:
        return ModuleResponse.transition(DEADLINE_NEEDS_YEAR, WizardStep.DEADLINE)
    if result.status == DateParseStatus.UNRECOGNIZED:
        return ModuleResponse.transition(DEADLINE_UNRECOGNIZED, WizardStep.DEADLINE)

    draft = state.draft
    draft.deadline = result.value
    rate = suggested_monthly_rate(draft.remaining or Decimal("0"), draft.deadline, today)
    if rate is None:
        return priority_prompt(f"Deadline set to **{draft.deadline.isoformat()}** 📅\n\n")

    response = ModuleResponse(
        text=(
            f"Deadline set to **{draft.deadline.isoformat()}** 📅\n\n"
            f"To get there you'd need to save about **{format_amount(rate, draft.currency)}** per month. "
            "Reply 'yes' to use that, enter your own monthly amount, or 'skip'."
        ),
        next_state=WizardStep.MONTHLY,
        metadata={"suggested_monthly_rate": str(rate)},
    )
    response.add_button("Yes", "yes")
    response.add_button("Skip", "skip")
    return response


async def handle_monthly(message: str, ctx: ModuleContext, state: WizardState) -> ModuleResponse:
    """Handle MONTHLY - "yes" adopts the suggested rate, "skip"/"no" leaves it unset."""
    draft = state.draft

    if is_skip(message):
        draft.monthly_savings_target = None
        return priority_prompt()

    if is_affirmative(message):
        if draft.deadline is None:
            return ModuleResponse.transition(MONTHLY_INVALID, WizardStep.MONTHLY)
        rate = suggested_monthly_rate(draft.remaining or Decimal("0"), draft.deadline, ctx.today())
        draft.monthly_savings_target = rate
        return priority_prompt(f"Great, {format_amount(rate, draft.currency)} per month it is.\n\n")

    amount = parse_amount(message)
    if amount is None or amount <= 0:
        return ModuleResponse.transition(MONTHLY_INVALID, WizardStep.MONTHLY)

    draft.monthly_savings_target = amount
    return priority_prompt(f"Got it, {format_amount(amount, draft.currency)} per month.\n\n")


async def handle_priority(message: str, ctx: ModuleContext, state: WizardState) -> ModuleResponse:
    """Handle PRIORITY - exact HIGH/MEDIUM/LOW or first-letter heuristic."""
    priority = parse_priority(message)
    if priority is None:
        return priority_prompt()

    draft = state.draft
    draft.priority = priority
    if draft.deadline is None and draft.monthly_savings_target is None:
        return deadline_required()
    return confirm_prompt(state)


async def handle_confirm(message: str, ctx: ModuleContext, state: WizardState) -> ModuleResponse:
    """Handle CONFIRM - confirm, cancel, or edit fields inline.

    Confirmation does not submit anything itself: it returns a CREATE_GOAL
    side effect and stays in CONFIRM until the submission outcome is known.

    Args:
        message: User's message
        ctx: Module context
        state: Wizard state of this session

    Returns:
        ModuleResponse
    """
    draft = state.draft

    if is_confirm(message):
        if draft.deadline is None and draft.monthly_savings_target is not None:
            draft.deadline = derive_deadline(
                draft.remaining or Decimal("0"),
                draft.monthly_savings_target,
                ctx.today(),
            )
        if draft.deadline is None:
            return deadline_required()

        request = draft.freeze()
        response = ModuleResponse(
            text=f"Creating your goal **{request.name}**... ⏳",
            next_state=WizardStep.CONFIRM,
            metadata={"submitted": True},
        )
        response.add_side_effect(SideEffect.create_goal(request.to_wire()))
        return response

    if is_cancel(message):
        state.reset()
        return ModuleResponse.end_flow(CANCELLED, WizardStep.IDLE)

    edits = apply_inline_edits(draft, message, ctx.today())
    notes = "".join(
        f"⚠️ Couldn't update {name.replace('_', ' ')}: {reason}\n"
        for name, reason in edits.rejected
    )

    if edits.changed:
        updated = ", ".join(name.replace("_", " ") for name in edits.applied)
        return confirm_prompt(state, prefix=f"Updated {updated} ✏️\n{notes}\n")

    return ModuleResponse.transition(notes + CONFIRM_HELP, WizardStep.CONFIRM)


# Total over WizardStep.
STEP_HANDLERS: dict[WizardStep, StepHandler] = {
    WizardStep.IDLE: handle_idle,
    WizardStep.NAME: handle_name,
    WizardStep.CATEGORY: handle_category,
    WizardStep.TARGET: handle_target,
    WizardStep.SAVED: handle_saved,
    WizardStep.DEADLINE: handle_deadline,
    WizardStep.MONTHLY: handle_monthly,
    WizardStep.PRIORITY: handle_priority,
    WizardStep.CONFIRM: handle_confirm,
}
