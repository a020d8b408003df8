"""Decorated detail and table views for interactive terminals.

This is the only renderer allowed to emit color. Styling goes through
:mod:`rich`; layout (padding, separators) is computed on the plain text so
column alignment does not depend on escape sequences.
"""

from __future__ import annotations

import io
import re
from collections.abc import Mapping, Sequence
from typing import Any, ClassVar

from rich.console import Console
from rich.text import Text

from lmsq.core.models import CliError, Column, FlatListResponse, PageInfo
from lmsq.output.fields import select_fields
from lmsq.output.formatters.base import compact_json, indented_json
from lmsq.output.formatters.text import TextRenderer

MIN_SEPARATOR_WIDTH = 30
MIN_COLUMN_WIDTH = 4
COLUMN_GAP = "  "

_ID_COLUMN = Column(key="id", label="ID")
_WORD_START = re.compile(r"\b\w")


def humanize_key(key: str) -> str:
    """Turn ``snake_case`` keys into ``Title Case`` labels."""
    return _WORD_START.sub(lambda match: match.group(0).upper(), key.replace("_", " "))


class PrettyRenderer:
    """Renderer for the ``pretty`` output mode."""

    passthrough: ClassVar[bool] = False

    def __init__(self, *, color: bool = True) -> None:
        self._color = color
        self._plain = TextRenderer()

    def render_raw(self, raw: Any) -> str:
        return indented_json(raw)

    def render_resource(
        self, resource: Mapping[str, Any], *, label: str, fields: Sequence[str] | None,
    ) -> str:
        filtered = select_fields(resource, fields) if fields else resource
        header = f"{label} #{filtered.get('id')}"
        separator = "═" * max(len(header), MIN_SEPARATOR_WIDTH)
        lines: list[Text] = [Text(header, style="bold"), Text(separator, style="dim"), Text("")]
        for key, value in filtered.items():
            if key == "id":
                continue
            line = Text("  ")
            line.append(f"{humanize_key(key)}:", style="dim")
            line.append("  ")
            line.append_text(_styled_value(value))
            lines.append(line)
        return self._render(lines)

    def render_list(
        self,
        flattened: FlatListResponse,
        *,
        columns: Sequence[Column],
        fields: Sequence[str] | None,
    ) -> str:
        resources = flattened.data
        if fields:
            for resource in resources:
                select_fields(resource, fields)
            active = [_ID_COLUMN, *(column for column in columns if column.key in fields)]
        else:
            active = [_ID_COLUMN, *columns]

        widths = [_column_width(column, resources) for column in active]

        header = Text()
        separator = Text()
        for index, (column, width) in enumerate(zip(active, widths, strict=True)):
            if index:
                header.append(COLUMN_GAP)
                separator.append(COLUMN_GAP)
            header.append(column.label.ljust(width), style="bold")
            separator.append("─" * width, style="dim")

        rows: list[Text] = []
        for resource in resources:
            row = Text()
            for index, (column, width) in enumerate(zip(active, widths, strict=True)):
                if index:
                    row.append(COLUMN_GAP)
                value = resource.get(column.key)
                cell = _cell_text(value).ljust(width)
                row.append(cell, style=_value_style(value))
            rows.append(row)

        lines = [header, separator, *rows, Text(""), _pagination_line(flattened.meta, len(resources))]
        meta = flattened.meta
        if meta.page < meta.page_count:
            lines.append(Text(f"→ Use --page {meta.page + 1} to see the next page", style="yellow"))
        return self._render(lines)

    def render_ids(self, ids: Sequence[str], meta: PageInfo) -> str:
        return self._plain.render_ids(ids, meta)

    def render_count(self, total: int) -> str:
        return self._plain.render_count(total)

    def render_pluck(self, value: Any) -> str:
        return self._plain.render_pluck(value)

    def render_error(self, error: CliError) -> str:
        return self._plain.render_error(error)

    def _render(self, lines: Sequence[Text]) -> str:
        buffer = io.StringIO()
        console = Console(
            file=buffer,
            force_terminal=self._color,
            color_system="standard" if self._color else None,
            no_color=not self._color,
            highlight=False,
            emoji=False,
            width=max((len(line.plain) for line in lines), default=0) + 1,
        )
        console.print(Text("\n").join(lines), end="", soft_wrap=True)
        return buffer.getvalue()


def _column_width(column: Column, resources: Sequence[Mapping[str, Any]]) -> int:
    if column.width is not None:
        return column.width
    widest = max((len(_cell_text(resource.get(column.key))) for resource in resources), default=0)
    return max(len(column.label), widest, MIN_COLUMN_WIDTH)


def _pagination_line(meta: PageInfo, shown: int) -> Text:
    start = (meta.page - 1) * meta.page_size + 1
    end = min(start + shown - 1, meta.total)
    return Text(
        f"Showing {start}-{end} of {meta.total} results (page {meta.page} of {meta.page_count})",
        style="dim",
    )


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (Mapping, list, tuple)):
        return compact_json(value)
    return str(value)


def _value_style(value: Any) -> str:
    if value is True:
        return "green"
    if value is False:
        return "red"
    if value is None:
        return "dim"
    return ""


def _styled_value(value: Any) -> Text:
    if value is None:
        return Text("null", style="dim")
    return Text(_cell_text(value), style=_value_style(value))


__all__ = ["PrettyRenderer", "humanize_key"]
