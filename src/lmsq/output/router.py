"""Route raw API payloads through flattening, shortcuts and the mode renderer."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from lmsq.core.models import CliError, Column, OutputMode, OutputOptions
from lmsq.output.fields import extract_ids, pluck_field
from lmsq.output.formatters.base import Renderer
from lmsq.output.formatters.json import JsonRenderer, RawJsonRenderer
from lmsq.output.formatters.pretty import PrettyRenderer
from lmsq.output.formatters.text import TextRenderer
from lmsq.output.normalize import flatten_list_response, flatten_resource

_RENDERERS: Mapping[OutputMode, Renderer] = {
    OutputMode.TEXT: TextRenderer(),
    OutputMode.PRETTY: PrettyRenderer(),
    OutputMode.JSON: JsonRenderer(),
    OutputMode.JSON_RAW: RawJsonRenderer(),
}

_DEFAULT_OPTIONS = OutputOptions()


def get_renderer(mode: OutputMode) -> Renderer:
    """Return the renderer registered for *mode*."""
    return _RENDERERS[mode]


def output_resource(
    raw: Any,
    mode: OutputMode,
    resource_label: str,
    options: OutputOptions | None = None,
) -> str:
    """Render a single-resource envelope.

    ``--pluck`` short-circuits every other option. Unknown field names raise
    :class:`~lmsq.core.errors.UnknownFieldError` for the caller to handle.
    """
    renderer = get_renderer(mode)
    if renderer.passthrough:
        return renderer.render_raw(raw)

    opts = options or _DEFAULT_OPTIONS
    flat = flatten_resource(raw)
    if opts.pluck:
        return renderer.render_pluck(pluck_field(flat, opts.pluck))
    return renderer.render_resource(flat, label=resource_label, fields=opts.fields)


def output_list(
    raw: Any,
    mode: OutputMode,
    columns: Sequence[Column],
    options: OutputOptions | None = None,
) -> str:
    """Render a collection envelope; ``--count`` wins over ``--only-ids``."""
    renderer = get_renderer(mode)
    if renderer.passthrough:
        return renderer.render_raw(raw)

    opts = options or _DEFAULT_OPTIONS
    flattened = flatten_list_response(raw)
    if opts.count:
        return renderer.render_count(flattened.meta.total)
    if opts.only_ids:
        return renderer.render_ids(extract_ids(flattened.data), flattened.meta)
    return renderer.render_list(flattened, columns=columns, fields=opts.fields)


def output_error(error: CliError, mode: OutputMode) -> str:
    """Render *error*: JSON for the JSON modes, plain lines otherwise."""
    return get_renderer(mode).render_error(error)


__all__ = ["get_renderer", "output_error", "output_list", "output_resource"]
