"""Shared fixtures for the plains test-suite."""

from __future__ import annotations

from pathlib import Path

import pytest

from plains_core.contractor import Contractor
from plains_core.filesystem import Filesystem
from plains_core.store import Store
from plains_core.workers import WorkerServices


@pytest.fixture(autouse=True)
def _isolate_environment(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path_factory.mktemp("xdg-config")))
    for name in ("PLAINS_SRC", "PLAINS_DIST", "PLAINS_ENVIRONMENT", "PLAINS_CONFIG"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def src(tmp_path: Path) -> Path:
    root = tmp_path / "src"
    root.mkdir()
    return root


@pytest.fixture
def dist(tmp_path: Path) -> Path:
    return tmp_path / "dist"


@pytest.fixture
def filesystem(src: Path, dist: Path) -> Filesystem:
    fs = Filesystem()
    fs.define_root(src)
    fs.define_destination(dist)
    return fs


@pytest.fixture
def services(filesystem: Filesystem) -> WorkerServices:
    return WorkerServices(store=Store(), filesystem=filesystem, contractor=Contractor())
