"""
Tests for the goal service wire models.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from pathwise.models.goal import (
    ActionBlock,
    ActionType,
    ChatReply,
    GoalCategory,
    GoalRecord,
    GoalRequest,
    ProjectionRequest,
)


class TestGoalRequest:
    def test_accepts_camel_case_and_dumps_it(self) -> None:
        request = GoalRequest.model_validate({
            "name": "Car",
            "category": "VEHICLE",
            "targetAmount": "8000.5",
            "deadline": "2027-06-30",
        })

        assert request.target_amount == Decimal("8000.5")
        assert request.category == GoalCategory.VEHICLE
        assert request.to_wire() == {
            "name": "Car",
            "category": "VEHICLE",
            "targetAmount": 8000.5,
            "savedAmount": 0.0,
            "currency": "BHD",
            "deadline": "2027-06-30",
            "priority": "MEDIUM",
            "monthlySavingsTarget": None,
        }

    def test_is_frozen(self) -> None:
        request = GoalRequest(
            name="Car", category=GoalCategory.VEHICLE,
            target_amount=Decimal("8000"), deadline=date(2027, 6, 30),
        )
        with pytest.raises(ValidationError):
            request.name = "Boat"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"targetAmount": 0},
            {"savedAmount": -1},
            {"category": "YACHT"},
            {"name": ""},
            {"monthlySavingsTarget": 0},
        ],
    )
    def test_rejects_invalid_fields(self, overrides: dict) -> None:
        body = {"name": "Car", "category": "VEHICLE", "targetAmount": 8000, "deadline": "2027-06-30"}
        with pytest.raises(ValidationError):
            GoalRequest.model_validate({**body, **overrides})


class TestGoalRecord:
    def test_numeric_id_and_unknown_fields(self) -> None:
        record = GoalRecord.model_validate({
            "id": 42, "name": "Trip", "category": "PETS", "progressPercentage": 12.5, "userId": 7,
        })

        assert record.id == "42"
        assert record.category == "PETS"
        assert record.progress_percentage == 12.5

    def test_merged_with_skips_identifiers(self) -> None:
        record = GoalRecord(id="1", name="Trip", target_amount=Decimal("3000"), status="ACTIVE")
        body = record.merged_with({"goalId": "1", "goalName": "Trip", "targetAmount": 3500})

        assert body == {"name": "Trip", "targetAmount": 3500}


def test_projection_rate_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        ProjectionRequest(monthly_savings_rate=Decimal("0"))


def test_chat_reply_timestamp_optional() -> None:
    assert ChatReply.model_validate({"message": "Hi"}).timestamp is None


def test_action_block_type() -> None:
    block = ActionBlock.model_validate({"type": "UPDATE_GOAL"})
    assert block.type == ActionType.UPDATE_GOAL
    assert block.data == {}
