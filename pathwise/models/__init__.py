"""
Models package for PathWise Coach.

This package exports the wire models of the remote goal and AI services.

Usage:
    from pathwise.models import GoalRequest, GoalRecord, ChatReply
"""

from pathwise.models.goal import (
    ActionBlock,
    ActionType,
    ChatReply,
    GoalCategory,
    GoalPriority,
    GoalRecord,
    GoalRequest,
    ProjectionRequest,
    SimulationRequest,
)

__all__ = [
    # Enums
    "ActionType",
    "GoalCategory",
    "GoalPriority",
    # Goals
    "GoalRecord",
    "GoalRequest",
    "ProjectionRequest",
    "SimulationRequest",
    # AI coach
    "ActionBlock",
    "ChatReply",
]
