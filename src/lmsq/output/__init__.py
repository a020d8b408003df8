"""Output pipeline: mode resolution, flattening, field selection and rendering."""

from .errors import (
    EXIT_API_ERROR,
    EXIT_AUTH_ERROR,
    EXIT_INVALID_USAGE,
    EXIT_NETWORK_ERROR,
    EXIT_SUCCESS,
    classify_error,
    get_exit_code,
)
from .fields import extract_ids, pluck_field, select_fields
from .mode import resolve_output_mode
from .normalize import flatten_list_response, flatten_resource
from .router import get_renderer, output_error, output_list, output_resource

__all__ = [
    "EXIT_API_ERROR",
    "EXIT_AUTH_ERROR",
    "EXIT_INVALID_USAGE",
    "EXIT_NETWORK_ERROR",
    "EXIT_SUCCESS",
    "classify_error",
    "extract_ids",
    "flatten_list_response",
    "flatten_resource",
    "get_exit_code",
    "get_renderer",
    "output_error",
    "output_list",
    "output_resource",
    "pluck_field",
    "resolve_output_mode",
    "select_fields",
]
