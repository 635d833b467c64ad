"""
Centralized Error Response Builder for PathWise Coach.

Provides consistent error codes and messages for use across the API
and service layers.

Error codes are constants that map to translatable message strings.
The builder returns structured error dicts compatible with the API
response envelope.
"""

from __future__ import annotations

from typing import Any

# =============================================================================
# Error Code Constants
# =============================================================================

AUTH_REQUIRED = "AUTH_REQUIRED"
NOT_FOUND = "NOT_FOUND"
VALIDATION_ERROR = "VALIDATION_ERROR"
INTERNAL_ERROR = "INTERNAL_ERROR"
REQUEST_IN_FLIGHT = "REQUEST_IN_FLIGHT"
SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"

# =============================================================================
# Message Registry
#
# Maps (error_code, language) -> message string.
# Falls back to "en" if a translation is missing for the requested language.
# =============================================================================

_ERROR_MESSAGES: dict[str, dict[str, str]] = {
    AUTH_REQUIRED: {
        "en": "Authentication is required.",
    },
    NOT_FOUND: {
        "en": "The requested resource was not found.",
    },
    VALIDATION_ERROR: {
        "en": "Invalid input. Please check your request.",
    },
    INTERNAL_ERROR: {
        "en": "An internal error occurred. Please try again.",
    },
    REQUEST_IN_FLIGHT: {
        "en": "Your previous message is still being processed.",
    },
    SERVICE_UNAVAILABLE: {
        "en": "Sorry, I'm having trouble connecting. Please try again shortly.",
    },
}

_DEFAULT_LANG = "en"


# =============================================================================
# Error Response Builder
# =============================================================================


def get_error_message(code: str, lang: str = "en") -> str:
    """
    Get the message for a given error code.

    Falls back to English if the requested language is not available.
    Falls back to a generic message if the error code is unknown.

    Args:
        code: Error code constant (e.g. AUTH_REQUIRED, NOT_FOUND)
        lang: ISO 639-1 language code

    Returns:
        Message string
    """
    messages = _ERROR_MESSAGES.get(code, {})
    return messages.get(lang, messages.get(_DEFAULT_LANG, "An error occurred."))


def build_error_response(
    code: str,
    message: str | None = None,
    details: dict[str, Any] | None = None,
    lang: str = "en",
) -> dict[str, Any]:
    """
    Build a structured error response dict.

    If no message is provided, the registered message for the error code
    and language is used automatically.

    Args:
        code: Error code constant
        message: Optional override message (bypasses the registry)
        details: Optional additional error details
        lang: ISO 639-1 language code for message lookup

    Returns:
        Structured error dict: {"code": str, "message": str, "details": dict | None}
    """
    resolved_message = message if message is not None else get_error_message(code, lang)
    error: dict[str, Any] = {
        "code": code,
        "message": resolved_message,
    }
    if details is not None:
        error["details"] = details
    return error


__all__ = [
    "AUTH_REQUIRED",
    "NOT_FOUND",
    "VALIDATION_ERROR",
    "INTERNAL_ERROR",
    "REQUEST_IN_FLIGHT",
    "SERVICE_UNAVAILABLE",
    "get_error_message",
    "build_error_response",
]
