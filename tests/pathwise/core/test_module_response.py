"""
Tests for ModuleResponse, Button and SideEffect.
"""

from __future__ import annotations

import pytest

from pathwise.core import Button, ModuleResponse, SideEffect, SideEffectType


class TestModuleResponse:
    def test_text_only(self) -> None:
        response = ModuleResponse.text_only("Hello")
        assert response.text == "Hello"
        assert response.buttons is None
        assert response.next_state is None
        assert not response.is_end_of_flow

    def test_transition(self) -> None:
        response = ModuleResponse.transition("Next", "category")
        assert response.next_state == "category"

    def test_end_flow(self) -> None:
        response = ModuleResponse.end_flow("Bye", "idle")
        assert response.is_end_of_flow
        assert response.next_state == "idle"

    def test_add_button_defaults_reply_to_label(self) -> None:
        response = ModuleResponse(text="Pick one")
        response.add_button("HIGH")
        response.add_button("Confirm", "confirm")

        assert response.buttons == [Button("HIGH", "HIGH"), Button("Confirm", "confirm")]

    def test_add_side_effect(self) -> None:
        response = ModuleResponse(text="Creating")
        response.add_side_effect(SideEffect.create_goal({"name": "Trip"}))

        assert len(response.side_effects) == 1
        assert response.side_effects[0].effect_type == SideEffectType.CREATE_GOAL


class TestButton:
    def test_blank_label_rejected(self) -> None:
        with pytest.raises(ValueError):
            Button(" ", "x")

    def test_blank_reply_rejected(self) -> None:
        with pytest.raises(ValueError):
            Button("Yes", "")


class TestSideEffect:
    def test_goal_effects(self) -> None:
        assert SideEffect.update_goal({"id": "1"}).effect_type == SideEffectType.UPDATE_GOAL
        assert SideEffect.delete_goal({"id": "1"}).effect_type == SideEffectType.DELETE_GOAL

    def test_context_event_payload(self) -> None:
        effect = SideEffect.context_event("goal_created", goalName="Trip")
        assert effect.effect_type == SideEffectType.CONTEXT_EVENT
        assert effect.payload == {"event": "goal_created", "goalName": "Trip"}

    def test_ids_are_unique(self) -> None:
        assert SideEffect.create_goal({}).id != SideEffect.create_goal({}).id
