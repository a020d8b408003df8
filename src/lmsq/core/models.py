"""Domain models shared by the output pipeline and the command layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

type FlatResource = dict[str, Any]


class OutputMode(StrEnum):
    """Mutually exclusive rendering modes, exactly one is active per invocation."""

    TEXT = "text"
    PRETTY = "pretty"
    JSON = "json"
    JSON_RAW = "json-raw"


class ErrorKind(StrEnum):
    """Failure taxonomy surfaced to users and mapped onto exit codes."""

    API_ERROR = "api_error"
    AUTH_ERROR = "auth_error"
    INVALID_USAGE = "invalid_usage"
    NETWORK_ERROR = "network_error"


@dataclass(frozen=True)
class OutputOptions:
    """Output-related flags collected from the command line.

    ``json_raw`` outranks ``json`` which outranks ``no_color`` and ``color``.
    ``pluck`` only applies to single resources; ``count`` is checked before
    ``only_ids`` for lists. ``first`` only affects the requested page size.
    """

    json: bool = False
    json_raw: bool = False
    fields: tuple[str, ...] | None = None
    only_ids: bool = False
    count: bool = False
    first: bool = False
    pluck: str | None = None
    color: bool = False
    no_color: bool = False

    def __post_init__(self) -> None:
        """Store ``fields`` as a tuple so the options stay hashable."""
        if self.fields is not None:
            object.__setattr__(self, "fields", tuple(self.fields))


@dataclass(frozen=True)
class Column:
    """A table column used by the pretty list renderer."""

    key: str
    label: str
    width: int | None = None


@dataclass(frozen=True)
class PageInfo:
    """Pagination summary copied verbatim from ``meta.page``."""

    total: int
    page: int
    page_size: int
    page_count: int

    def to_payload(self) -> dict[str, int]:
        """Return the camel-cased mapping emitted in JSON output."""
        return {
            "total": self.total,
            "page": self.page,
            "pageSize": self.page_size,
            "pageCount": self.page_count,
        }


@dataclass(frozen=True)
class FlatListResponse:
    """A flattened collection: resources in server order plus pagination."""

    data: list[FlatResource] = field(default_factory=list)
    meta: PageInfo = field(default_factory=lambda: PageInfo(0, 1, 1, 0))

    def to_payload(self) -> dict[str, Any]:
        """Return the ``{data, meta}`` mapping emitted in JSON output."""
        return {"data": list(self.data), "meta": self.meta.to_payload()}


class CliError(BaseModel):
    """A classified failure ready to be rendered and mapped to an exit code."""

    model_config = ConfigDict(frozen=True)

    error: ErrorKind
    message: str
    status: int | None = None
    fields: list[str] = Field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        """Return the mapping rendered by ``output_error``."""
        payload: dict[str, Any] = {"error": self.error.value, "message": self.message}
        if self.status is not None:
            payload["status"] = self.status
        if self.fields:
            payload["fields"] = list(self.fields)
        return payload


__all__ = [
    "CliError",
    "Column",
    "ErrorKind",
    "FlatListResponse",
    "FlatResource",
    "OutputMode",
    "OutputOptions",
    "PageInfo",
]
