"""Utilities for redacting credentials and customer data before logging."""

from __future__ import annotations

import re
import typing
from collections.abc import Mapping, Sequence
from typing import Any

_REDACTION_PLACEHOLDER = "[redacted]"
_ELLIPSIS = "…"

_EMAIL_PATTERN = re.compile(r"(?i)\b[a-z0-9._%+-]+@[a-z0-9.-]+\.[a-z]{2,}\b")
_BEARER_PATTERN = re.compile(r"(?i)\bbearer\s+[A-Za-z0-9._~+/=-]+")
_JWT_PATTERN = re.compile(r"\beyJ[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\b")
_API_KEY_PATTERN = re.compile(r"\blsq_(?:live|test)_[A-Za-z0-9]+\b")

_SENSITIVE_KEYS = frozenset({"authorization", "api_key", "apikey", "license_key", "key"})


def mask_secrets(text: str, *, max_length: int = 512) -> str:
    """Redact API keys, bearer tokens and emails from *text* and cap its length."""
    masked = _BEARER_PATTERN.sub(f"Bearer {_REDACTION_PLACEHOLDER}", text)
    masked = _JWT_PATTERN.sub(_REDACTION_PLACEHOLDER, masked)
    masked = _API_KEY_PATTERN.sub(_REDACTION_PLACEHOLDER, masked)
    masked = _EMAIL_PATTERN.sub(_REDACTION_PLACEHOLDER, masked)

    if max_length > 0 and len(masked) > max_length:
        return masked[:max_length] + _ELLIPSIS
    return masked


def scrub_for_logging(value: Any, *, max_length: int = 512) -> Any:
    """Return a structure safe for logging by masking nested string values."""
    if isinstance(value, str):
        processed: Any = mask_secrets(value, max_length=max_length)
    elif isinstance(value, bytes):
        processed = mask_secrets(value.decode("utf-8", errors="ignore"), max_length=max_length)
    elif isinstance(value, Mapping):
        processed_mapping: dict[Any, Any] = {}
        mapping_items = typing.cast("Mapping[Any, Any]", value)
        for key, item in mapping_items.items():
            if isinstance(key, str) and key.lower() in _SENSITIVE_KEYS:
                processed_mapping[key] = _REDACTION_PLACEHOLDER
                continue
            processed_mapping[key] = scrub_for_logging(item, max_length=max_length)
        processed = processed_mapping
    elif isinstance(value, tuple):
        tuple_items = typing.cast("tuple[Any, ...]", value)
        processed = tuple(
            scrub_for_logging(item, max_length=max_length) for item in tuple_items
        )
    elif isinstance(value, Sequence):
        sequence_items = typing.cast("Sequence[Any]", value)
        processed = [
            scrub_for_logging(item, max_length=max_length) for item in sequence_items
        ]
    else:
        processed = value
    return processed


__all__ = ["mask_secrets", "scrub_for_logging"]
