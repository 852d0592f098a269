"""Shared fixtures: isolated config and a fresh repository per test."""

from __future__ import annotations

from pathlib import Path

import pytest

from fsmeta.core.constants import StorageFormat
from fsmeta.core.root import RootHandle
from fsmeta.core.store.model import Repository
from fsmeta.core.store.persist import init_repository
from fsmeta.core.store.repository import MetadataRepository


@pytest.fixture(autouse=True)
def isolated_config(
    tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch
) -> Path:
    """Point FSMETA_CONFIG at a per-test location and clear FSMETA_* overrides."""
    cfg = tmp_path_factory.mktemp("cfg") / "config.toml"
    monkeypatch.setenv("FSMETA_CONFIG", str(cfg))
    for var in ("FSMETA_LOG_LEVEL", "FSMETA_DEFAULT_FORMAT", "FSMETA_OPEN_COMMAND"):
        monkeypatch.delenv(var, raising=False)
    return cfg


@pytest.fixture
def root(tmp_path: Path) -> Path:
    """A directory that will hold the repository (symlinks resolved)."""
    d = tmp_path / "root"
    d.mkdir()
    return d.resolve()


@pytest.fixture(params=list(StorageFormat), ids=lambda f: f.value)
def fmt(request: pytest.FixtureRequest) -> StorageFormat:
    return request.param


@pytest.fixture
def handle(root: Path) -> RootHandle:
    return init_repository(root, StorageFormat.JSON)


@pytest.fixture
def repo(root: Path) -> MetadataRepository:
    """In-memory repository rooted at ``root``; nothing is written to disk."""
    h = RootHandle(root=root, format=StorageFormat.JSON)
    return MetadataRepository(h, Repository.empty(StorageFormat.JSON), cwd=root)
