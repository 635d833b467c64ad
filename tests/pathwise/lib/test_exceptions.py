"""
Tests for the exception hierarchy and the error response builder.
"""

from __future__ import annotations

import pytest

from pathwise.lib.errors import (
    AUTH_REQUIRED,
    REQUEST_IN_FLIGHT,
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

EXCEPTION_CLASSES = [
    ConfigurationError,
    ValidationError,
    SerializationError,
    ServiceError,
    ExternalServiceError,
    GoalNotFoundError,
    StateError,
    RequestInFlightError,
]


@pytest.mark.parametrize("exc_class", EXCEPTION_CLASSES)
def test_all_are_pathwise_exceptions(exc_class: type[PathwiseException]) -> None:
    assert issubclass(exc_class, PathwiseException)


def test_service_error_attributes() -> None:
    exc = ServiceError("Goal not found", status_code=404)
    assert exc.message == "Goal not found"
    assert exc.status_code == 404
    assert str(exc) == "Goal not found"
    assert ServiceError("timeout").status_code is None


def test_goal_not_found_keeps_reference() -> None:
    exc = GoalNotFoundError("Yacht")
    assert exc.reference == "Yacht"
    assert "Yacht" in str(exc)


def test_request_in_flight_is_state_error() -> None:
    exc = RequestInFlightError("s1")
    assert isinstance(exc, StateError)
    assert exc.session_id == "s1"


class TestErrorResponses:
    def test_registered_message(self) -> None:
        assert get_error_message(AUTH_REQUIRED) == "Authentication is required."

    def test_unknown_language_falls_back_to_english(self) -> None:
        assert get_error_message(REQUEST_IN_FLIGHT, lang="de") == get_error_message(REQUEST_IN_FLIGHT)

    def test_unknown_code(self) -> None:
        assert get_error_message("NOPE") == "An error occurred."

    def test_build_with_override_and_details(self) -> None:
        error = build_error_response(AUTH_REQUIRED, message="Log in first", details={"hint": "token"})
        assert error == {"code": AUTH_REQUIRED, "message": "Log in first", "details": {"hint": "token"}}

    def test_build_without_details(self) -> None:
        assert "details" not in build_error_response(AUTH_REQUIRED)
