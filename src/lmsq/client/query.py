"""Builders for JSON:API query parameters (pagination, filters, includes)."""

from __future__ import annotations

from collections.abc import Collection, Mapping
from dataclasses import dataclass

from lmsq.core.errors import InvalidUsageError

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 5
MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class PageRequest:
    """Requested page number and size."""

    number: int = DEFAULT_PAGE
    size: int = DEFAULT_PAGE_SIZE

    def to_params(self) -> dict[str, int]:
        """Return the ``page[...]`` query parameters."""
        return {"page[number]": self.number, "page[size]": self.size}


def parse_comma_separated(value: str) -> list[str]:
    """Split a comma-separated flag value, dropping blanks."""
    return [item.strip() for item in value.split(",") if item.strip()]


def parse_positive_int(value: str, *, option: str) -> int:
    """Parse *value* as a positive integer for *option*."""
    try:
        number = int(value)
    except ValueError:
        message = f'Invalid number "{value}" for {option}'
        raise InvalidUsageError(message) from None
    if number < 1:
        message = f"{option} must be at least 1, got {number}"
        raise InvalidUsageError(message)
    return number


def build_page(page: str | None, page_size: str | None, *, first: bool = False) -> PageRequest:
    """Build the page request; ``--first`` forces a page size of one."""
    number = parse_positive_int(page, option="--page") if page else DEFAULT_PAGE
    if first:
        return PageRequest(number=number, size=1)
    size = parse_positive_int(page_size, option="--page-size") if page_size else DEFAULT_PAGE_SIZE
    if size > MAX_PAGE_SIZE:
        message = f"--page-size must be at most {MAX_PAGE_SIZE}, got {size}"
        raise InvalidUsageError(message)
    return PageRequest(number=number, size=size)


def build_filter(values: Mapping[str, str | None]) -> dict[str, str]:
    """Return ``filter[...]`` parameters for the values that were provided."""
    return {f"filter[{key}]": value for key, value in values.items() if value is not None}


def build_include(raw: str | None, valid_includes: Collection[str]) -> str | None:
    """Validate a ``--include`` value and return it in query form."""
    if not raw:
        return None
    requested = parse_comma_separated(raw)
    for name in requested:
        if name not in valid_includes:
            message = f'Invalid include "{name}". Valid includes: {", ".join(valid_includes)}'
            raise InvalidUsageError(message)
    return ",".join(requested)


__all__ = [
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    "PageRequest",
    "build_filter",
    "build_include",
    "build_page",
    "parse_comma_separated",
    "parse_positive_int",
]
