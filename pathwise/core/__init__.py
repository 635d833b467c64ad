"""
Core Module System for PathWise Coach.

This package contains the core interfaces shared by conversational modules.

Exports:
    - Module: Protocol that all modules implement
    - ModuleContext: Context passed to module operations
    - ModuleResponse: Response returned by module operations
    - Button, SideEffect: UI and action elements
"""

from .buttons import Button
from .module_context import ModuleContext
from .module_protocol import Module
from .module_response import ModuleResponse
from .side_effects import SideEffect, SideEffectType

__all__ = [
    "Module",
    "ModuleContext",
    "ModuleResponse",
    "Button",
    "SideEffect",
    "SideEffectType",
]
