"""
Goal Wizard Data Structures.

Defines the draft goal being assembled by the wizard, the category labels,
and the helpers that render amounts and the confirmation summary.

Reference: goal_wizard.py (main module)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any

from pathwise.lib.exceptions import ValidationError
from pathwise.models.goal import GoalCategory, GoalPriority, GoalRequest

CURRENCY = "BHD"
CURRENCY_SYMBOLS: dict[str, str] = {"BHD": "BD"}

# Dinar amounts carry three decimals (fils); other currencies two.
_MINOR_UNITS: dict[str, Decimal] = {"BHD": Decimal("0.001")}
_CENTS = Decimal("0.01")


# =============================================================================
# Categories
# =============================================================================

CATEGORY_LABELS: dict[GoalCategory, str] = {
    GoalCategory.SAVINGS: "General Savings",
    GoalCategory.TRAVEL: "Travel",
    GoalCategory.EDUCATION: "Education",
    GoalCategory.VEHICLE: "Vehicle",
    GoalCategory.PROPERTY: "Property",
    GoalCategory.EMERGENCY: "Emergency Fund",
    GoalCategory.OTHER: "Other",
}


def category_label(category: GoalCategory) -> str:
    """Human label for a category."""
    return CATEGORY_LABELS[category]


# =============================================================================
# Draft
# =============================================================================

@dataclass
class GoalDraft:
    """The goal under construction. Every field is unset until its step runs."""

    name: str | None = None
    category: GoalCategory | None = None
    target_amount: Decimal | None = None
    saved_amount: Decimal | None = None
    deadline: date | None = None
    monthly_savings_target: Decimal | None = None
    priority: GoalPriority | None = None
    currency: str = CURRENCY

    @property
    def remaining(self) -> Decimal | None:
        """Amount still to save, or None while the target is unknown."""
        if self.target_amount is None:
            return None
        return self.target_amount - (self.saved_amount or Decimal("0"))

    def freeze(self) -> GoalRequest:
        """Freeze the draft into an immutable create payload.

        Returns:
            GoalRequest ready for the goal service

        Raises:
            ValidationError: If a required field is still missing
        """
        missing = [
            field_name
            for field_name in ("name", "category", "target_amount", "deadline")
            if getattr(self, field_name) is None
        ]
        if missing:
            raise ValidationError(f"Draft is incomplete: missing {', '.join(missing)}")

        return GoalRequest(
            name=self.name,
            category=self.category,
            target_amount=self.target_amount,
            saved_amount=self.saved_amount or Decimal("0"),
            currency=self.currency,
            deadline=self.deadline,
            priority=self.priority or GoalPriority.MEDIUM,
            monthly_savings_target=self.monthly_savings_target,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-safe dict for the state store."""
        return {
            "name": self.name,
            "category": self.category.value if self.category else None,
            "target_amount": str(self.target_amount) if self.target_amount is not None else None,
            "saved_amount": str(self.saved_amount) if self.saved_amount is not None else None,
            "deadline": self.deadline.isoformat() if self.deadline else None,
            "monthly_savings_target": (
                str(self.monthly_savings_target)
                if self.monthly_savings_target is not None
                else None
            ),
            "priority": self.priority.value if self.priority else None,
            "currency": self.currency,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GoalDraft:
        """Restore a draft serialized with ``to_dict``."""

        def _decimal(key: str) -> Decimal | None:
            raw = data.get(key)
            return Decimal(raw) if raw is not None else None

        return cls(
            name=data.get("name"),
            category=GoalCategory(data["category"]) if data.get("category") else None,
            target_amount=_decimal("target_amount"),
            saved_amount=_decimal("saved_amount"),
            deadline=date.fromisoformat(data["deadline"]) if data.get("deadline") else None,
            monthly_savings_target=_decimal("monthly_savings_target"),
            priority=GoalPriority(data["priority"]) if data.get("priority") else None,
            currency=data.get("currency") or CURRENCY,
        )


# =============================================================================
# Rendering
# =============================================================================

def format_amount(amount: Decimal, currency: str = CURRENCY) -> str:
    """Render an amount as ``BD 5000.000`` (``USD 5000.00`` for other currencies)."""
    symbol = CURRENCY_SYMBOLS.get(currency, currency)
    quantum = _MINOR_UNITS.get(currency, _CENTS)
    return f"{symbol} {amount.quantize(quantum):f}"


def build_summary(draft: GoalDraft) -> str:
    """Build the confirmation summary shown at the CONFIRM step.

    Args:
        draft: The draft to summarize

    Returns:
        Multi-line summary with the confirm/cancel/edit instructions
    """
    currency = draft.currency
    target = (
        format_amount(draft.target_amount, currency)
        if draft.target_amount is not None
        else "Not set"
    )
    saved = format_amount(draft.saved_amount or Decimal("0"), currency)
    deadline = (
        draft.deadline.isoformat()
        if draft.deadline
        else "Not set (will be worked out from your monthly savings)"
    )
    monthly = (
        f"{format_amount(draft.monthly_savings_target, currency)} / month"
        if draft.monthly_savings_target is not None
        else "Not set"
    )
    category = category_label(draft.category) if draft.category else "Not set"
    priority = draft.priority.value if draft.priority else GoalPriority.MEDIUM.value

    return (
        "Here's your goal summary 📋\n\n"
        f"• Name: {draft.name}\n"
        f"• Category: {category}\n"
        f"• Target: {target}\n"
        f"• Already saved: {saved}\n"
        f"• Deadline: {deadline}\n"
        f"• Monthly savings: {monthly}\n"
        f"• Priority: {priority}\n\n"
        "Reply **confirm** to create this goal or **cancel** to discard it.\n"
        "Want to change something? Just tell me, e.g. 'target is 5000'."
    )
