"""
Prometheus Monitoring for PathWise Coach.

Provides Prometheus metrics for:
- HTTP request latency and error rates of the coach API
- Goal wizard step transitions
- Goal actions dispatched to the remote goal service
- Coach messages by route (wizard or remote chat)
- Remote service call latency

Exposed on ``GET /metrics`` for Prometheus scraping.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

logger = logging.getLogger(__name__)


# =============================================================================
# Metrics Definitions
# =============================================================================

# HTTP Request Metrics
http_requests_total = Counter(
    "pathwise_http_requests_total",
    "Total HTTP requests received",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "pathwise_http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

# Goal Wizard Metrics
wizard_transitions_total = Counter(
    "pathwise_wizard_transitions_total",
    "Goal wizard step transitions",
    ["from_step", "to_step"],
)

# Goal Action Metrics
goal_actions_total = Counter(
    "pathwise_goal_actions_total",
    "Goal actions dispatched to the goal service",
    ["kind", "outcome"],
)

# Coach Message Metrics
coach_messages_total = Counter(
    "pathwise_coach_messages_total",
    "User messages handled by the coach",
    ["route"],
)

# Remote Service Metrics
remote_call_duration_seconds = Histogram(
    "pathwise_remote_call_duration_seconds",
    "Latency of calls to the remote PathWise backend",
    ["operation"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)


# =============================================================================
# Metrics Recording Functions
# =============================================================================


def record_request(method: str, endpoint: str, status: int, duration_seconds: float) -> None:
    """
    Record HTTP request metrics.

    Args:
        method: HTTP method (GET, POST, etc.)
        endpoint: Route template (not the raw path, to bound label cardinality)
        status: HTTP status code
        duration_seconds: Request duration in seconds
    """
    http_requests_total.labels(method=method, endpoint=endpoint, status=str(status)).inc()
    http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(
        duration_seconds
    )


def record_wizard_transition(from_step: str, to_step: str) -> None:
    """Record a goal wizard step change."""
    wizard_transitions_total.labels(from_step=from_step, to_step=to_step).inc()


def record_goal_action(kind: str, outcome: str) -> None:
    """
    Record a dispatched goal action.

    Args:
        kind: CREATE, UPDATE or DELETE
        outcome: success, failed or not_found
    """
    goal_actions_total.labels(kind=kind, outcome=outcome).inc()


def record_coach_message(route: str) -> None:
    """Record a user message; route is "wizard" or "chat"."""
    coach_messages_total.labels(route=route).inc()


@contextmanager
def track_remote_call(operation: str) -> Iterator[dict[str, Any]]:
    """
    Context manager timing a call to the remote backend.

    Usage:
        >>> with track_remote_call("create_goal"):
        ...     await client.post("/api/goals", json=body)
    """
    start_time = time.time()
    ctx: dict[str, Any] = {}
    try:
        yield ctx
    finally:
        remote_call_duration_seconds.labels(operation=operation).observe(
            time.time() - start_time
        )


# =============================================================================
# Prometheus Metrics Export
# =============================================================================


class PrometheusMetrics:
    """Prometheus metrics exporter backing the /metrics endpoint."""

    content_type = CONTENT_TYPE_LATEST

    @staticmethod
    def generate_metrics() -> bytes:
        """
        Generate Prometheus metrics in text format.

        Returns:
            Metrics in Prometheus text exposition format
        """
        return generate_latest()
