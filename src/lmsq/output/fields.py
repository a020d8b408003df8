"""Field selection for ``--fields``, ``--pluck`` and ``--only-ids``.

``id`` is always part of a selection, whether or not it was requested.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from lmsq.core.errors import UnknownFieldError


def select_fields(resource: Mapping[str, Any], fields: Sequence[str]) -> dict[str, Any]:
    """Return a new mapping holding ``id`` plus each requested field.

    Raises :class:`UnknownFieldError` for the first requested name that is not
    a key of *resource*; the error lists every valid key.
    """
    valid_keys = list(resource.keys())
    for name in fields:
        if name != "id" and name not in resource:
            raise UnknownFieldError(name, valid_keys)

    selected: dict[str, Any] = {"id": resource.get("id")}
    for name in fields:
        if name != "id":
            selected[name] = resource[name]
    return selected


def pluck_field(resource: Mapping[str, Any], field: str) -> Any:
    """Return the value stored under *field*."""
    if field not in resource:
        raise UnknownFieldError(field, list(resource.keys()))
    return resource[field]


def extract_ids(resources: Iterable[Mapping[str, Any]]) -> list[str]:
    """Return the stringified ``id`` of every resource, preserving order."""
    return [str(resource["id"]) for resource in resources]


__all__ = ["extract_ids", "pluck_field", "select_fields"]
