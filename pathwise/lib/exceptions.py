"""
Custom exception hierarchy for PathWise Coach.

Provides structured exception types for all subsystems:
- Configuration, validation, serialization
- Remote goal/chat service calls
- Conversation state (wizard, in-flight guard)

All exceptions inherit from PathwiseException, enabling
catch-all for PathWise-specific errors while keeping the
ability to catch specific error types.
"""

from __future__ import annotations


class PathwiseException(Exception):
    """Base exception for all PathWise Coach errors."""


class ConfigurationError(PathwiseException):
    """Missing environment variables, invalid config values, or startup failures."""


class ValidationError(PathwiseException):
    """Input validation, parsing, or type conversion failures."""


class SerializationError(PathwiseException):
    """JSON encode/decode, data serialization/deserialization failures."""


class ServiceError(PathwiseException):
    """Remote service failures (non-success responses, connection refused, timeouts).

    Attributes:
        message: Message to show the user (service-provided when available)
        status_code: HTTP status code, or None for transport failures
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class ExternalServiceError(ServiceError):
    """Failures of infrastructure dependencies (Redis, etc.)."""


class GoalNotFoundError(PathwiseException):
    """A goal referenced by name or id could not be resolved."""

    def __init__(self, reference: str) -> None:
        self.reference = reference
        super().__init__(f"No goal matching {reference!r}")


class StateError(PathwiseException):
    """Invalid state transitions, missing required state."""


class RequestInFlightError(StateError):
    """A message was submitted while the session was still processing another one."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Session {session_id!r} is already processing a message")
