from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

SAMPLES_DIR = Path(__file__).resolve().parents[1] / "samples"


@pytest.fixture(scope="session")
def samples_dir() -> Path:
    """Return the directory containing bundled API response fixtures."""
    return SAMPLES_DIR


@pytest.fixture
def load_sample(samples_dir: Path) -> Callable[[str], Any]:
    """Return a loader that parses a sample file into fresh Python objects."""

    def _load(name: str) -> Any:
        return json.loads((samples_dir / name).read_text(encoding="utf-8"))

    return _load


@pytest.fixture
def single_order(load_sample: Callable[[str], Any]) -> dict[str, Any]:
    """Single order envelope as returned by ``GET /orders/12345``."""
    return load_sample("single_order.json")


@pytest.fixture
def order_list(load_sample: Callable[[str], Any]) -> dict[str, Any]:
    """Two-item order page with ``meta.page.total`` of 47."""
    return load_sample("order_list.json")


@pytest.fixture
def single_subscription(load_sample: Callable[[str], Any]) -> dict[str, Any]:
    """Single subscription envelope with null and boolean attributes."""
    return load_sample("single_subscription.json")
