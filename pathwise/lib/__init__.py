"""
Lib package for PathWise Coach.

Contains shared utilities:
- logging.py: structlog configuration
- exceptions.py: Exception hierarchy
- errors.py: Centralized error response builder
"""

from pathwise.lib.errors import (
    AUTH_REQUIRED,
    INTERNAL_ERROR,
    NOT_FOUND,
    REQUEST_IN_FLIGHT,
    SERVICE_UNAVAILABLE,
    VALIDATION_ERROR,
    build_error_response,
    get_error_message,
)
from pathwise.lib.exceptions import (
    ConfigurationError,
    ExternalServiceError,
    GoalNotFoundError,
    PathwiseException,
    RequestInFlightError,
    SerializationError,
    ServiceError,
    StateError,
    ValidationError,
)

__all__ = [
    # Errors
    "AUTH_REQUIRED",
    "NOT_FOUND",
    "VALIDATION_ERROR",
    "INTERNAL_ERROR",
    "REQUEST_IN_FLIGHT",
    "SERVICE_UNAVAILABLE",
    "get_error_message",
    "build_error_response",
    # Exceptions
    "PathwiseException",
    "ConfigurationError",
    "ValidationError",
    "SerializationError",
    "ServiceError",
    "ExternalServiceError",
    "GoalNotFoundError",
    "StateError",
    "RequestInFlightError",
]
