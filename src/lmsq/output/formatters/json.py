"""JSON output: flattened (``--json``) and verbatim (``--json-raw``)."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, ClassVar

from lmsq.core.models import CliError, Column, FlatListResponse, PageInfo
from lmsq.output.fields import select_fields
from lmsq.output.formatters.base import compact_json, indented_json


class JsonRenderer:
    """Renderer emitting flattened JSON."""

    passthrough: ClassVar[bool] = False

    def render_raw(self, raw: Any) -> str:
        return indented_json(raw)

    def render_resource(
        self, resource: Mapping[str, Any], *, label: str, fields: Sequence[str] | None,
    ) -> str:
        del label
        data = select_fields(resource, fields) if fields else dict(resource)
        return indented_json(data)

    def render_list(
        self,
        flattened: FlatListResponse,
        *,
        columns: Sequence[Column],
        fields: Sequence[str] | None,
    ) -> str:
        del columns
        if fields:
            data = [select_fields(resource, fields) for resource in flattened.data]
        else:
            data = list(flattened.data)
        return indented_json({"data": data, "meta": flattened.meta.to_payload()})

    def render_ids(self, ids: Sequence[str], meta: PageInfo) -> str:
        return compact_json({"ids": list(ids), "meta": meta.to_payload()})

    def render_count(self, total: int) -> str:
        return compact_json({"count": total})

    def render_pluck(self, value: Any) -> str:
        return compact_json(value)

    def render_error(self, error: CliError) -> str:
        return indented_json(error.to_payload())


class RawJsonRenderer(JsonRenderer):
    """Renderer that hands the upstream payload back untouched.

    The router never flattens for this renderer, so only :meth:`render_raw`
    and :meth:`render_error` are reached in practice.
    """

    passthrough: ClassVar[bool] = True


__all__ = ["JsonRenderer", "RawJsonRenderer"]
