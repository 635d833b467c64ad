"""
Quick-reply buttons for PathWise Coach.

Buttons are attached to ModuleResponse so a front end can render one-tap
replies (category choices, priorities, confirm/cancel). Tapping a button
sends its ``reply`` text back as an ordinary user message.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Button:
    """A quick-reply button displayed to the user.

    Attributes:
        text: The label displayed to the user
        reply: Message text submitted when the button is tapped
    """

    text: str
    reply: str

    def __post_init__(self) -> None:
        """Validate button configuration."""
        if not self.text.strip():
            raise ValueError("Button text must not be empty")
        if not self.reply.strip():
            raise ValueError("Button reply must not be empty")

    @classmethod
    def quick_reply(cls, text: str, reply: str | None = None) -> Button:
        """Create a button whose reply defaults to its label.

        Args:
            text: Button label
            reply: Reply text (defaults to ``text``)

        Returns:
            Button instance
        """
        return cls(text=text, reply=reply if reply is not None else text)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the API layer."""
        return {"text": self.text, "reply": self.reply}
