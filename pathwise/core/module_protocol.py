"""
Module Protocol for PathWise Coach.

Every conversational module implements this interface. This is the contract
between the coach session and individual modules (currently the goal wizard).
"""

from __future__ import annotations

from typing import Protocol

from .module_context import ModuleContext
from .module_response import ModuleResponse


class Module(Protocol):
    """Every module implements this interface."""

    name: str
    intents: list[str]

    async def handle(
        self,
        message: str,
        ctx: ModuleContext,
    ) -> ModuleResponse:
        """Handle a user message within this module.

        Args:
            message: The user's input message
            ctx: Module context

        Returns:
            ModuleResponse with text, optional buttons, next_state and side_effects
        """
        ...

    async def on_enter(self, ctx: ModuleContext) -> ModuleResponse:
        """Called when the user enters this module.

        Args:
            ctx: Module context

        Returns:
            ModuleResponse with the initial prompt
        """
        ...

    async def on_exit(self, ctx: ModuleContext) -> None:
        """Called when the user leaves this module (cleanup).

        Args:
            ctx: Module context
        """
        ...

    async def is_active(self, ctx: ModuleContext) -> bool:
        """Whether the module is mid-flow for this session.

        Args:
            ctx: Module context

        Returns:
            True if the next message belongs to this module
        """
        ...
