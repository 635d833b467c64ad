"""
Module Response for PathWise Coach.

The response object returned by every module operation.
Contains text, quick replies, state transitions, and side effects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .buttons import Button
from .side_effects import SideEffect


@dataclass
class ModuleResponse:
    """Response returned by module handle/on_enter operations.

    Attributes:
        text: The response text to show to the user
        buttons: Optional list of quick-reply buttons
        next_state: Optional state to transition to (if None, state unchanged)
        side_effects: Optional list of side effects to execute
        metadata: Additional response metadata
        is_end_of_flow: True if this response ends the module flow
    """

    text: str

    buttons: list[Button] | None = None

    next_state: str | None = None

    side_effects: list[SideEffect] | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    is_end_of_flow: bool = False

    def add_button(self, text: str, reply: str | None = None) -> None:
        """Add a quick-reply button to the response.

        Args:
            text: Button label
            reply: Reply text sent when tapped (defaults to the label)
        """
        if self.buttons is None:
            self.buttons = []
        self.buttons.append(Button.quick_reply(text, reply))

    def add_side_effect(self, effect: SideEffect) -> None:
        """Add a side effect to the response.

        Args:
            effect: The side effect to execute after responding
        """
        if self.side_effects is None:
            self.side_effects = []
        self.side_effects.append(effect)

    @classmethod
    def text_only(cls, text: str) -> ModuleResponse:
        """Create a simple text-only response."""
        return cls(text=text)

    @classmethod
    def end_flow(cls, text: str, next_state: str | None = None) -> ModuleResponse:
        """Create a response that ends the module flow.

        Args:
            text: The final message
            next_state: Terminal state of the module, if any

        Returns:
            ModuleResponse that ends the flow
        """
        return cls(text=text, next_state=next_state, is_end_of_flow=True)

    @classmethod
    def transition(cls, text: str, next_state: str) -> ModuleResponse:
        """Create a response with a state transition.

        Args:
            text: The response text
            next_state: The next state to transition to

        Returns:
            ModuleResponse with state transition
        """
        return cls(text=text, next_state=next_state)
