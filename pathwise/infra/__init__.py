"""
Infrastructure module for PathWise Coach.

Provides Prometheus metrics for the coach API, the goal wizard and the
remote goal service calls.
"""

from pathwise.infra.monitoring import (
    PrometheusMetrics,
    record_coach_message,
    record_goal_action,
    record_request,
    record_wizard_transition,
    track_remote_call,
)

__all__ = [
    "PrometheusMetrics",
    "record_coach_message",
    "record_goal_action",
    "record_request",
    "record_wizard_transition",
    "track_remote_call",
]
