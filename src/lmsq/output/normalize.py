"""Flatten JSON:API envelopes into the shapes rendered by the CLI.

Single resources become ``{id, type, **attributes}``; collections become a
:class:`FlatListResponse` with pagination copied from ``meta.page``. The
``relationships``, ``links`` and ``jsonapi`` members never survive.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, cast

from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError as SchemaValidationError

from lmsq.core.errors import EnvelopeError
from lmsq.core.models import FlatListResponse, FlatResource, PageInfo

SCHEMA_DRAFT_URL = "https://json-schema.org/draft/2020-12/schema"

_RESOURCE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["type", "id", "attributes"],
    "properties": {
        "type": {"type": "string"},
        "id": {"type": ["string", "integer"]},
        "attributes": {"type": "object"},
    },
}

SINGLE_ENVELOPE_SCHEMA: dict[str, Any] = {
    "$schema": SCHEMA_DRAFT_URL,
    "title": "JsonApiSingleResponse",
    "type": "object",
    "required": ["data"],
    "properties": {"data": _RESOURCE_SCHEMA},
}

LIST_ENVELOPE_SCHEMA: dict[str, Any] = {
    "$schema": SCHEMA_DRAFT_URL,
    "title": "JsonApiListResponse",
    "type": "object",
    "required": ["data", "meta"],
    "properties": {
        "data": {"type": "array", "items": _RESOURCE_SCHEMA},
        "meta": {
            "type": "object",
            "required": ["page"],
            "properties": {
                "page": {
                    "type": "object",
                    "required": ["currentPage", "perPage", "lastPage", "total"],
                    "properties": {
                        "currentPage": {"type": "integer"},
                        "perPage": {"type": "integer"},
                        "lastPage": {"type": "integer"},
                        "total": {"type": "integer"},
                    },
                },
            },
        },
    },
}

_SINGLE_VALIDATOR = Draft202012Validator(SINGLE_ENVELOPE_SCHEMA)
_LIST_VALIDATOR = Draft202012Validator(LIST_ENVELOPE_SCHEMA)


def flatten_resource(envelope: Any) -> FlatResource:
    """Promote ``data.attributes`` of a single-resource envelope to the top level."""
    _validate(_SINGLE_VALIDATOR, envelope, kind="single-resource")
    mapping = cast("Mapping[str, Any]", envelope)
    return _flatten_item(cast("Mapping[str, Any]", mapping["data"]))


def flatten_list_response(envelope: Any) -> FlatListResponse:
    """Flatten every item of a collection envelope and simplify its pagination."""
    _validate(_LIST_VALIDATOR, envelope, kind="collection")
    mapping = cast("Mapping[str, Any]", envelope)
    items = cast("list[Mapping[str, Any]]", mapping["data"])
    page = cast("Mapping[str, int]", mapping["meta"]["page"])
    return FlatListResponse(
        data=[_flatten_item(item) for item in items],
        meta=PageInfo(
            total=page["total"],
            page=page["currentPage"],
            page_size=page["perPage"],
            page_count=page["lastPage"],
        ),
    )


def _flatten_item(resource: Mapping[str, Any]) -> FlatResource:
    flat: FlatResource = {"id": str(resource["id"]), "type": resource["type"]}
    attributes = cast("Mapping[str, Any]", resource["attributes"])
    for key, value in attributes.items():
        if key in flat:
            continue
        flat[key] = value
    return flat


def _validate(validator: Draft202012Validator, envelope: Any, *, kind: str) -> None:
    try:
        validator.validate(envelope)
    except SchemaValidationError as error:
        location = "/".join(str(part) for part in error.absolute_path) or "<root>"
        message = f"Malformed {kind} response at {location}: {error.message}"
        raise EnvelopeError(message) from error


__all__ = [
    "LIST_ENVELOPE_SCHEMA",
    "SINGLE_ENVELOPE_SCHEMA",
    "flatten_list_response",
    "flatten_resource",
]
