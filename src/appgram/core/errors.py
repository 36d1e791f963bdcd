"""
Error taxonomy for the SDK.

Network-facing operations never raise: failures are returned as an Err result
carrying one of these codes. The exception classes below are reserved for
programmer errors detected at construction time.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Client-side error codes."""

    NETWORK_ERROR = "NETWORK_ERROR"  # No response was obtained
    VALIDATION_ERROR = "VALIDATION_ERROR"  # Precondition failed before dispatch
    INVALID_RESPONSE = "INVALID_RESPONSE"  # Response did not match the expected schema
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    MISSING_SLUGS = "MISSING_SLUGS"
    EMPTY_FILE = "EMPTY_FILE"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    UPLOAD_ERROR = "UPLOAD_ERROR"


DEFAULT_ERROR_MESSAGE = "An error occurred"


def http_error_code(status_code: int) -> str:
    """Error code for a non-2xx HTTP status."""
    return f"HTTP_{status_code}"


def get_error_message(error: Any, fallback: str = DEFAULT_ERROR_MESSAGE) -> str:
    """
    Safely extract a human-readable message from an error value.

    Accepts an ApiError-like object, a mapping with a "message" key, an
    exception or a plain string. Falls back when nothing usable is found.
    """
    if not error:
        return fallback
    if isinstance(error, str):
        return error
    if isinstance(error, dict):
        message = error.get("message")
        return message if isinstance(message, str) and message else fallback
    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    if isinstance(error, Exception) and str(error):
        return str(error)
    return fallback


class AppgramError(Exception):
    """Base class for SDK programmer errors."""


class ConfigurationError(AppgramError):
    """Raised when the SDK is constructed with unusable configuration."""
