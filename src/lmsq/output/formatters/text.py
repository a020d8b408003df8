"""Plain ``key: value`` output for pipes and agents.

No color, no box drawing, no ANSI escape sequences.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, ClassVar

from lmsq.core.models import CliError, Column, FlatListResponse, PageInfo
from lmsq.output.fields import select_fields
from lmsq.output.formatters.base import indented_json, stringify_value


def resource_lines(resource: Mapping[str, Any]) -> list[str]:
    """Return one ``key: value`` line per field in natural key order."""
    return [f"{key}: {stringify_value(value)}" for key, value in resource.items()]


class TextRenderer:
    """Renderer for the ``text`` output mode."""

    passthrough: ClassVar[bool] = False

    def render_raw(self, raw: Any) -> str:
        return indented_json(raw)

    def render_resource(
        self, resource: Mapping[str, Any], *, label: str, fields: Sequence[str] | None,
    ) -> str:
        del label
        filtered = select_fields(resource, fields) if fields else resource
        return "\n".join(resource_lines(filtered))

    def render_list(
        self,
        flattened: FlatListResponse,
        *,
        columns: Sequence[Column],
        fields: Sequence[str] | None,
    ) -> str:
        del columns
        blocks: list[str] = []
        for resource in flattened.data:
            filtered = select_fields(resource, fields) if fields else resource
            blocks.append("\n".join(resource_lines(filtered)))
        meta = flattened.meta
        footer = f"[page {meta.page}/{meta.page_count}, {meta.total} total]"
        return "\n\n".join(blocks) + "\n\n" + footer

    def render_ids(self, ids: Sequence[str], meta: PageInfo) -> str:
        return "\n".join(ids) + f"\n[{meta.total} total]"

    def render_count(self, total: int) -> str:
        return str(total)

    def render_pluck(self, value: Any) -> str:
        return stringify_value(value)

    def render_error(self, error: CliError) -> str:
        lines = [f"error: {error.error.value}", f"message: {error.message}"]
        if error.status is not None:
            lines.append(f"status: {error.status}")
        if error.fields:
            lines.append(f"fields: {', '.join(error.fields)}")
        return "\n".join(lines)


__all__ = ["TextRenderer", "resource_lines"]
