"""Unit tests for the namespaced Store."""

from __future__ import annotations

from pathlib import Path

import pytest

from plains_core.config import PlainsConfig
from plains_core.errors import ConfigurationError
from plains_core.store import Store


def test_store_returns_namespaces_and_keys() -> None:
    store = Store()
    store.create("plains", {"src": "./src", "workers": {"cleaner": {"enabled": False}}})

    assert store.has("plains")
    assert store.get("plains", "src") == "./src"
    assert store.get("plains", "workers") == {"cleaner": {"enabled": False}}
    assert store.get("plains", "missing") is None
    assert store.get("plains", "missing", default="fallback") == "fallback"
    assert store.get("unknown") is None
    assert store.namespaces() == ("plains",)


def test_store_reads_attributes_of_typed_values(tmp_path: Path) -> None:
    config = PlainsConfig(src=tmp_path / "src", dist=tmp_path / "dist")
    store = Store()
    store.create("plains", config)

    assert store.get("plains") is config
    assert store.get("plains", "dist") == tmp_path / "dist"
    assert store.get("plains", "workers") is config.workers


def test_store_namespaces_are_created_once() -> None:
    store = Store()
    store.create("plains", {})

    with pytest.raises(ConfigurationError):
        store.create("plains", {})
    with pytest.raises(ConfigurationError):
        store.create("", {})
