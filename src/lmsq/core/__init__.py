"""Core domain modules for lmsq."""

from .errors import (
    ApiResponseError,
    ConfigurationError,
    EnvelopeError,
    InvalidUsageError,
    LmsqError,
    LmsqValidationError,
    TransportError,
    UnknownFieldError,
)
from .models import (
    CliError,
    Column,
    ErrorKind,
    FlatListResponse,
    FlatResource,
    OutputMode,
    OutputOptions,
    PageInfo,
)

__all__ = [
    "ApiResponseError",
    "CliError",
    "Column",
    "ConfigurationError",
    "EnvelopeError",
    "ErrorKind",
    "FlatListResponse",
    "FlatResource",
    "InvalidUsageError",
    "LmsqError",
    "LmsqValidationError",
    "OutputMode",
    "OutputOptions",
    "PageInfo",
    "TransportError",
    "UnknownFieldError",
]
