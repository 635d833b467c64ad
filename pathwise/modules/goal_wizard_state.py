"""
Goal Wizard State Machine.

Defines the steps of the goal-creation dialogue and the per-session wizard
state (current step plus the draft under construction).

Reference: goal_wizard.py (main module)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from pathwise.modules.goal_models import GoalDraft


# =============================================================================
# State Machine
# =============================================================================

class WizardStep(StrEnum):
    """Steps of the goal wizard. IDLE is both initial and terminal."""

    IDLE = "idle"
    NAME = "name"
    CATEGORY = "category"
    TARGET = "target"
    SAVED = "saved"
    DEADLINE = "deadline"
    MONTHLY = "monthly"
    PRIORITY = "priority"
    CONFIRM = "confirm"


# =============================================================================
# Session State
# =============================================================================

@dataclass
class WizardState:
    """Wizard state of one chat session."""

    step: WizardStep = WizardStep.IDLE
    draft: GoalDraft = field(default_factory=GoalDraft)

    @property
    def is_active(self) -> bool:
        return self.step != WizardStep.IDLE

    def reset(self) -> None:
        """Discard the draft (keeping its currency) and return to IDLE."""
        self.step = WizardStep.IDLE
        self.draft = GoalDraft(currency=self.draft.currency)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the state store."""
        return {"step": self.step.value, "draft": self.draft.to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WizardState:
        """Restore a state serialized with ``to_dict``."""
        return cls(
            step=WizardStep(data.get("step", WizardStep.IDLE)),
            draft=GoalDraft.from_dict(data.get("draft") or {}),
        )
