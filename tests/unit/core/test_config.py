from __future__ import annotations

import json
import re
from pathlib import Path

import pytest

from lmsq.core.config import (
    get_api_key,
    get_api_key_source,
    get_config_path,
    load_config,
    mask_key,
    remove_api_key,
    save_api_key,
)
from lmsq.core.errors import ConfigurationError


@pytest.fixture
def config_path(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Point the credential file into a temporary directory."""
    path = tmp_path / "lmsq" / "config.json"
    monkeypatch.setenv("LMSQ_CONFIG", str(path))
    monkeypatch.delenv("LEMONSQUEEZY_API_KEY", raising=False)
    return path


def test_default_config_path(monkeypatch: pytest.MonkeyPatch) -> None:
    """Without an override the file lives under ~/.config."""
    monkeypatch.delenv("LMSQ_CONFIG", raising=False)

    path = get_config_path()

    assert path.parts[-3:] == (".config", "lemonsqueezy-cli", "config.json")


def test_save_and_load_round_trip(config_path: Path) -> None:
    """A saved key is read back from the config file."""
    saved_to = save_api_key("lsq_test_abcdef123456")

    assert saved_to == config_path
    assert json.loads(config_path.read_text(encoding="utf-8")) == {"apiKey": "lsq_test_abcdef123456"}
    assert get_api_key() == "lsq_test_abcdef123456"
    assert get_api_key_source() == "config"


def test_resolution_order(config_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """The flag beats the environment which beats the config file."""
    save_api_key("from-config")
    monkeypatch.setenv("LEMONSQUEEZY_API_KEY", "from-env")

    assert get_api_key("from-flag") == "from-flag"
    assert get_api_key_source("from-flag") == "flag"
    assert get_api_key() == "from-env"
    assert get_api_key_source() == "env"


def test_missing_key_raises(config_path: Path) -> None:
    """No key anywhere is a configuration error."""
    assert get_api_key_source() == "none"
    with pytest.raises(ConfigurationError, match="lmsq auth login"):
        get_api_key()


def test_load_config_returns_none_when_absent(config_path: Path) -> None:
    """A missing file is not an error."""
    assert load_config() is None


@pytest.mark.parametrize("content", ["{not json", "[1, 2]"])
def test_load_config_rejects_invalid_files(config_path: Path, content: str) -> None:
    """Unparseable or non-object files raise ConfigurationError."""
    config_path.parent.mkdir(parents=True)
    config_path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigurationError, match=re.escape(str(config_path))):
        load_config()


def test_load_config_rejects_undecodable_bytes(config_path: Path) -> None:
    """A file that is not UTF-8 raises ConfigurationError instead of UnicodeDecodeError."""
    config_path.parent.mkdir(parents=True)
    config_path.write_bytes(b'{"apiKey": "\xff\xfe"}')

    with pytest.raises(ConfigurationError, match="Failed to read CLI configuration"):
        load_config()
    with pytest.raises(ConfigurationError):
        get_api_key()


def test_remove_api_key_is_idempotent(config_path: Path) -> None:
    """Removing twice succeeds and leaves no file."""
    save_api_key("secret-key-value")

    assert remove_api_key() == config_path
    assert remove_api_key() == config_path
    assert not config_path.exists()


def test_mask_key() -> None:
    """Only a short prefix of long keys is shown."""
    assert mask_key("short") == "****"
    assert mask_key("lsq_live_1234567890") == "lsq_live…********"
