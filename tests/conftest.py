"""Shared fixtures: every test runs against a staging tree used as offline root."""
from __future__ import annotations

from pathlib import Path

import pytest

from pkgalt.config import Config
from pkgalt.store import RegistryStore


@pytest.fixture
def offline_root(tmp_path: Path) -> Path:
    root = tmp_path / "rootfs"
    root.mkdir()
    return root


@pytest.fixture
def config(offline_root: Path) -> Config:
    return Config.from_dict({"alternatives": {"offline_root": str(offline_root)}})


@pytest.fixture
def store(config: Config) -> RegistryStore:
    return RegistryStore(config.admin_dir)


@pytest.fixture
def link_of(offline_root: Path):
    """Map a virtual-root path to its location inside the staging tree."""

    def _resolve(path: str) -> Path:
        return Path(f"{offline_root}{path}")

    return _resolve
