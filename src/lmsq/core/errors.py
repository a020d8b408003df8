"""Domain-specific exception hierarchy for lmsq."""

from __future__ import annotations

from collections.abc import Sequence


class LmsqError(Exception):
    """Base class for all domain-specific errors raised by lmsq."""


class LmsqValidationError(LmsqError):
    """Raised when inputs, flags, or payloads fail validation rules."""


class UnknownFieldError(LmsqValidationError):
    """Raised when a requested field is not present on a flattened resource."""

    def __init__(self, field: str, valid_fields: Sequence[str]) -> None:
        self.field = field
        self.valid_fields = tuple(valid_fields)
        message = f'Unknown field "{field}". Valid fields: {", ".join(self.valid_fields)}'
        super().__init__(message)


class InvalidUsageError(LmsqValidationError):
    """Raised when command-line arguments cannot be turned into a request."""


class EnvelopeError(LmsqValidationError):
    """Raised when an upstream payload does not have the JSON:API shape."""


class ConfigurationError(LmsqError):
    """Raised when the API key or the CLI configuration cannot be resolved."""


class TransportError(LmsqError):
    """Raised when the HTTP transport cannot obtain a response."""


class ApiResponseError(LmsqError):
    """Raised when the upstream API answers with a structured error."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


__all__ = [
    "ApiResponseError",
    "ConfigurationError",
    "EnvelopeError",
    "InvalidUsageError",
    "LmsqError",
    "LmsqValidationError",
    "TransportError",
    "UnknownFieldError",
]
