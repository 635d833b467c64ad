"""
Wire models for the remote PathWise goal and AI services.

The remote backend speaks camelCase JSON. Models here use snake_case
attributes with camelCase aliases so they can be built from Python code and
validated from responses alike.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import StrEnum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

# Amounts travel as JSON numbers; Decimal keeps them exact in Python.
Money = Annotated[
    Decimal,
    PlainSerializer(lambda v: float(v), return_type=float, when_used="json"),
]


class GoalCategory(StrEnum):
    """Goal categories accepted by the goal service."""

    SAVINGS = "SAVINGS"
    TRAVEL = "TRAVEL"
    EDUCATION = "EDUCATION"
    VEHICLE = "VEHICLE"
    PROPERTY = "PROPERTY"
    EMERGENCY = "EMERGENCY"
    OTHER = "OTHER"


class GoalPriority(StrEnum):
    """Goal priorities."""

    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class ActionType(StrEnum):
    """Machine-actionable commands embedded in chat replies."""

    CREATE_GOAL = "CREATE_GOAL"
    UPDATE_GOAL = "UPDATE_GOAL"
    DELETE_GOAL = "DELETE_GOAL"


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_wire(self) -> dict[str, Any]:
        """Dump as a camelCase JSON-ready dict."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# Goals
# =============================================================================


class GoalRequest(_WireModel):
    """Immutable body of ``POST /api/goals`` and ``PUT /api/goals/{id}``."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    category: GoalCategory
    target_amount: Money = Field(..., gt=0)
    saved_amount: Money = Field(default=Decimal("0"), ge=0)
    currency: str = "BHD"
    deadline: date
    priority: GoalPriority = GoalPriority.MEDIUM
    monthly_savings_target: Money | None = Field(default=None, gt=0)


class GoalRecord(_WireModel):
    """A goal as returned by the goal service.

    Category and priority are kept as plain strings: the service may know
    values this client does not. Numeric ids are read as strings.
    """

    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    name: str
    category: str | None = None
    target_amount: Money | None = None
    saved_amount: Money | None = None
    monthly_savings_target: Money | None = None
    currency: str | None = None
    deadline: date | None = None
    priority: str | None = None
    status: str | None = None
    progress_percentage: float | None = None

    def merged_with(self, changes: dict[str, Any]) -> dict[str, Any]:
        """Overlay camelCase ``changes`` onto this record's writable fields.

        Args:
            changes: Fields to change, in wire (camelCase) form

        Returns:
            Full camelCase body for ``PUT /api/goals/{id}``
        """
        body = self.model_dump(
            mode="json",
            by_alias=True,
            exclude_none=True,
            exclude={"id", "status", "progress_percentage"},
        )
        for key, value in changes.items():
            if key in ("id", "goalId", "goalName"):
                continue
            body[key] = value
        return body


class ProjectionRequest(_WireModel):
    """Body of ``POST /api/goals/{id}/projection``."""

    monthly_savings_rate: Money = Field(..., gt=0)


class SimulationRequest(_WireModel):
    """Body of ``POST /api/goals/simulate``."""

    goal_id: str
    current_monthly_savings_target: Money = Field(..., gt=0)
    spending_adjustments: dict[str, Money] = Field(..., min_length=1)


# =============================================================================
# AI coach
# =============================================================================


class ChatReply(_WireModel):
    """Response of ``POST /api/ai/chat`` and ``GET /api/ai/advice``."""

    message: str
    role: str | None = None
    timestamp: datetime | None = None


class ActionBlock(BaseModel):
    """A command parsed out of a fenced block in a chat reply."""

    type: ActionType
    data: dict[str, Any] = Field(default_factory=dict)
