"""Output mode resolution from flags and terminal capability."""

from __future__ import annotations

from lmsq.core.models import OutputMode, OutputOptions


def resolve_output_mode(options: OutputOptions, *, interactive: bool) -> OutputMode:
    """Pick exactly one output mode; the first matching rule wins.

    ``--json-raw`` beats ``--json``, both beat the explicit color flags, and
    only when no flag is given does *interactive* (whether stdout is a
    terminal) decide between ``pretty`` and ``text``.
    """
    if options.json_raw:
        return OutputMode.JSON_RAW
    if options.json:
        return OutputMode.JSON
    if options.no_color:
        return OutputMode.TEXT
    if options.color:
        return OutputMode.PRETTY
    return OutputMode.PRETTY if interactive else OutputMode.TEXT


__all__ = ["resolve_output_mode"]
