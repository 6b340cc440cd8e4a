# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest
from fakes import GZIP_DESC, FakeHost, InstalledPackage

from pkgrestore.config import RestoreConfig


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    path = tmp_path / "db"
    (path / "local").mkdir(parents=True)
    return path


@pytest.fixture
def workspace_parent(tmp_path: Path) -> Path:
    path = tmp_path / "tmp"
    path.mkdir()
    return path


@pytest.fixture
def destination(tmp_path: Path) -> Path:
    path = tmp_path / "out"
    path.mkdir()
    return path


@pytest.fixture
def host(db_path: Path) -> FakeHost:
    return FakeHost(db_path)


@pytest.fixture
def make_config(db_path: Path, workspace_parent: Path, tmp_path: Path) -> Callable[..., RestoreConfig]:
    def _make(overrides: dict[str, object] | None = None) -> RestoreConfig:
        base = RestoreConfig()
        values: dict[str, object] = {
            "manager.db_path": db_path,
            "archive.workspace_dir": workspace_parent,
            "archive.root": tmp_path / "root",
            "output.emoji": False,
            "output.color": False,
        }
        values.update(overrides or {})
        return base.with_overrides(values)

    return _make


@pytest.fixture
def gzip_package() -> InstalledPackage:
    return InstalledPackage(
        name="gzip",
        version="1.10-1",
        files=["/usr/", "/usr/bin/", "/usr/bin/gzip", "/usr/bin/gunzip"],
        desc=GZIP_DESC,
    )
