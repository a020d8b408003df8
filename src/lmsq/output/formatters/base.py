"""Renderer protocol shared by every output mode."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import Any, ClassVar, Protocol

from lmsq.core.models import CliError, Column, FlatListResponse, PageInfo


class Renderer(Protocol):
    """Strategy that turns flattened data into the text written to stdout."""

    passthrough: ClassVar[bool]

    def render_raw(self, raw: Any) -> str:
        """Serialize the upstream payload without touching it."""
        ...

    def render_resource(
        self, resource: Mapping[str, Any], *, label: str, fields: Sequence[str] | None,
    ) -> str:
        """Render one flattened resource."""
        ...

    def render_list(
        self,
        flattened: FlatListResponse,
        *,
        columns: Sequence[Column],
        fields: Sequence[str] | None,
    ) -> str:
        """Render a flattened page of resources."""
        ...

    def render_ids(self, ids: Sequence[str], meta: PageInfo) -> str:
        """Render the ``--only-ids`` shortcut."""
        ...

    def render_count(self, total: int) -> str:
        """Render the ``--count`` shortcut."""
        ...

    def render_pluck(self, value: Any) -> str:
        """Render the ``--pluck`` shortcut."""
        ...

    def render_error(self, error: CliError) -> str:
        """Render a classified failure."""
        ...


def compact_json(value: Any) -> str:
    """Serialize *value* without insignificant whitespace."""
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def indented_json(value: Any) -> str:
    """Serialize *value* with a two-space indent."""
    return json.dumps(value, ensure_ascii=False, indent=2)


def stringify_value(value: Any) -> str:
    """Convert a scalar or nested value into its plain-text form."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (Mapping, list, tuple)):
        return compact_json(value)
    return str(value)


__all__ = ["Renderer", "compact_json", "indented_json", "stringify_value"]
