"""
Module Context for PathWise Coach.

The context passed to every module handle/on_enter/on_exit call.
Contains the session information the module needs to process a message.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import Any


@dataclass
class ModuleContext:
    """Context passed to every module operation.

    Attributes:
        session_id: Unique identifier for this chat session
        module_name: Name of the currently active module
        state: Current state in the module's state machine
        language: ISO 639-1 language code
        today: Callable returning the current calendar date
        metadata: Additional module-specific metadata
    """

    session_id: str
    module_name: str
    state: str = ""
    language: str = "en"
    today: Callable[[], date] = date.today

    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    last_interaction_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    metadata: dict[str, Any] = field(default_factory=dict)

    def update_interaction(self) -> None:
        """Update the last interaction timestamp."""
        self.last_interaction_at = datetime.now(UTC)
