from __future__ import annotations

import pytest

from lmsq.core.errors import (
    ApiResponseError,
    ConfigurationError,
    EnvelopeError,
    InvalidUsageError,
    TransportError,
    UnknownFieldError,
)
from lmsq.core.models import CliError, ErrorKind
from lmsq.output.errors import (
    EXIT_API_ERROR,
    EXIT_AUTH_ERROR,
    EXIT_INVALID_USAGE,
    EXIT_NETWORK_ERROR,
    classify_error,
    get_exit_code,
)


def test_unknown_field_is_invalid_usage_with_field_name() -> None:
    """Unknown field errors carry the offending name."""
    error = classify_error(UnknownFieldError("author", ["id", "status"]))

    assert error.error is ErrorKind.INVALID_USAGE
    assert error.fields == ["author"]
    assert get_exit_code(error) == EXIT_INVALID_USAGE


@pytest.mark.parametrize(
    ("thrown", "expected"),
    [
        (InvalidUsageError("--page must be at least 1, got 0"), ErrorKind.INVALID_USAGE),
        (EnvelopeError("Malformed single-resource response at <root>"), ErrorKind.INVALID_USAGE),
        (ConfigurationError("No API key configured."), ErrorKind.AUTH_ERROR),
        (TransportError("Network request failed after 3 attempts"), ErrorKind.NETWORK_ERROR),
        (ApiResponseError("Not found", status=404), ErrorKind.API_ERROR),
    ],
)
def test_domain_errors_are_classified_by_type(thrown: Exception, expected: ErrorKind) -> None:
    """Errors raised by lmsq map onto their kind regardless of wording."""
    assert classify_error(thrown).error is expected


@pytest.mark.parametrize(
    ("message", "expected"),
    [
        ("Invalid API key", ErrorKind.AUTH_ERROR),
        ("auth token expired", ErrorKind.AUTH_ERROR),
        ('Unknown field "x"', ErrorKind.INVALID_USAGE),
        ("connection reset by peer", ErrorKind.NETWORK_ERROR),
    ],
)
def test_foreign_errors_are_classified_by_message(message: str, expected: ErrorKind) -> None:
    """Other exceptions fall back to message matching."""
    assert classify_error(RuntimeError(message)).error is expected


def test_non_exception_values_are_network_errors() -> None:
    """Anything without a recognised message counts as a network failure."""
    error = classify_error(42)

    assert error == CliError(error=ErrorKind.NETWORK_ERROR, message="42")


def test_api_response_error_keeps_status_for_exit_code() -> None:
    """A 401 from the API exits as an authentication failure."""
    error = classify_error(ApiResponseError("Unauthenticated.", status=401))

    assert error.status == 401
    assert get_exit_code(error) == EXIT_AUTH_ERROR


@pytest.mark.parametrize(
    ("error", "code"),
    [
        (CliError(error=ErrorKind.API_ERROR, message="boom", status=500), EXIT_API_ERROR),
        (CliError(error=ErrorKind.API_ERROR, message="no", status=401), EXIT_AUTH_ERROR),
        (CliError(error=ErrorKind.AUTH_ERROR, message="no key"), EXIT_AUTH_ERROR),
        (CliError(error=ErrorKind.INVALID_USAGE, message="bad"), EXIT_INVALID_USAGE),
        (CliError(error=ErrorKind.NETWORK_ERROR, message="down"), EXIT_NETWORK_ERROR),
    ],
)
def test_exit_codes(error: CliError, code: int) -> None:
    """Each failure kind maps onto its stable exit code."""
    assert get_exit_code(error) == code
