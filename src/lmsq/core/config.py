"""API key storage and resolution.

The key is resolved from, in order: an explicit override (``--api-key``),
the ``LEMONSQUEEZY_API_KEY`` environment variable, and the JSON config file
at ``~/.config/lemonsqueezy-cli/config.json`` (``LMSQ_CONFIG`` points
elsewhere).
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal, cast

from lmsq.core.errors import ConfigurationError

API_KEY_ENV = "LEMONSQUEEZY_API_KEY"
CONFIG_PATH_ENV = "LMSQ_CONFIG"

type KeySource = Literal["flag", "env", "config", "none"]

_MISSING_KEY_MESSAGE = (
    "No API key configured. Run `lmsq auth login` or set LEMONSQUEEZY_API_KEY."
)


def get_config_path() -> Path:
    """Return the location of the credential file."""
    config_env = os.environ.get(CONFIG_PATH_ENV)
    if config_env:
        return Path(config_env).expanduser()
    return Path.home() / ".config" / "lemonsqueezy-cli" / "config.json"


def load_config() -> Mapping[str, Any] | None:
    """Read the credential file, returning ``None`` when it does not exist."""
    config_path = get_config_path()
    if not config_path.exists():
        return None

    try:
        text = config_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as error:
        message = f"Failed to read CLI configuration from {config_path}: {error}"
        raise ConfigurationError(message) from error

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as error:
        message = f"Failed to parse CLI configuration from {config_path}: {error}"
        raise ConfigurationError(message) from error

    if not isinstance(payload, Mapping):
        message = f"CLI configuration at {config_path} must be a JSON object"
        raise ConfigurationError(message)

    return cast("Mapping[str, Any]", payload)


def get_api_key(override: str | None = None) -> str:
    """Resolve the API key or raise :class:`ConfigurationError`."""
    if override:
        return override

    env_key = os.environ.get(API_KEY_ENV)
    if env_key:
        return env_key

    config = load_config()
    if config is not None:
        stored = config.get("apiKey")
        if isinstance(stored, str) and stored:
            return stored

    raise ConfigurationError(_MISSING_KEY_MESSAGE)


def get_api_key_source(override: str | None = None) -> KeySource:
    """Report where :func:`get_api_key` would take the key from."""
    if override:
        return "flag"
    if os.environ.get(API_KEY_ENV):
        return "env"
    if get_config_path().exists():
        return "config"
    return "none"


def save_api_key(api_key: str) -> Path:
    """Persist *api_key* to the credential file and return its path."""
    config_path = get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    serialized = json.dumps({"apiKey": api_key}, indent=2)
    config_path.write_text(serialized + "\n", encoding="utf-8")
    return config_path


def remove_api_key() -> Path:
    """Delete the credential file if present and return its path."""
    config_path = get_config_path()
    config_path.unlink(missing_ok=True)
    return config_path


def mask_key(key: str) -> str:
    """Return a display-safe version of *key*."""
    if len(key) <= 8:
        return "****"
    return f"{key[:8]}…{'*' * 8}"


__all__ = [
    "API_KEY_ENV",
    "CONFIG_PATH_ENV",
    "KeySource",
    "get_api_key",
    "get_api_key_source",
    "get_config_path",
    "load_config",
    "mask_key",
    "remove_api_key",
    "save_api_key",
]
