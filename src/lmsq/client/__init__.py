"""Transport layer for the Lemon Squeezy API."""

from .api import DEFAULT_BASE_URL, ApiFailure, ApiResult, LemonSqueezyClient
from .query import (
    PageRequest,
    build_filter,
    build_include,
    build_page,
    parse_comma_separated,
    parse_positive_int,
)

__all__ = [
    "DEFAULT_BASE_URL",
    "ApiFailure",
    "ApiResult",
    "LemonSqueezyClient",
    "PageRequest",
    "build_filter",
    "build_include",
    "build_page",
    "parse_comma_separated",
    "parse_positive_int",
]
