"""Failure classification and the exit-code contract.

Exit codes are stable across every command: 0 success, 1 API error,
2 invalid usage, 3 authentication error, 4 network error.
"""

from __future__ import annotations

from lmsq.core.errors import (
    ApiResponseError,
    ConfigurationError,
    LmsqValidationError,
    TransportError,
    UnknownFieldError,
)
from lmsq.core.models import CliError, ErrorKind

EXIT_SUCCESS = 0
EXIT_API_ERROR = 1
EXIT_INVALID_USAGE = 2
EXIT_AUTH_ERROR = 3
EXIT_NETWORK_ERROR = 4

_AUTH_MARKERS = ("API key", "auth")
_USAGE_MARKER = "Unknown field"


def classify_error(thrown: object) -> CliError:
    """Map an exception (or any other value) onto the failure taxonomy.

    Errors raised by lmsq itself are classified by type. Anything else is
    classified by message content, so the wording of upstream errors decides
    whether they count as authentication, usage or network failures.
    """
    message = str(thrown)

    if isinstance(thrown, UnknownFieldError):
        return CliError(error=ErrorKind.INVALID_USAGE, message=message, fields=[thrown.field])
    if isinstance(thrown, LmsqValidationError):
        return CliError(error=ErrorKind.INVALID_USAGE, message=message)
    if isinstance(thrown, ConfigurationError):
        return CliError(error=ErrorKind.AUTH_ERROR, message=message)
    if isinstance(thrown, ApiResponseError):
        return CliError(error=ErrorKind.API_ERROR, message=message, status=thrown.status)
    if isinstance(thrown, TransportError):
        return CliError(error=ErrorKind.NETWORK_ERROR, message=message)

    if any(marker in message for marker in _AUTH_MARKERS):
        return CliError(error=ErrorKind.AUTH_ERROR, message=message)
    if _USAGE_MARKER in message:
        return CliError(error=ErrorKind.INVALID_USAGE, message=message)
    return CliError(error=ErrorKind.NETWORK_ERROR, message=message)


def get_exit_code(error: CliError) -> int:
    """Return the process exit code for *error*."""
    if error.error is ErrorKind.AUTH_ERROR or error.status == 401:
        return EXIT_AUTH_ERROR
    if error.error is ErrorKind.NETWORK_ERROR:
        return EXIT_NETWORK_ERROR
    if error.error is ErrorKind.INVALID_USAGE:
        return EXIT_INVALID_USAGE
    return EXIT_API_ERROR


__all__ = [
    "EXIT_API_ERROR",
    "EXIT_AUTH_ERROR",
    "EXIT_INVALID_USAGE",
    "EXIT_NETWORK_ERROR",
    "EXIT_SUCCESS",
    "classify_error",
    "get_exit_code",
]
