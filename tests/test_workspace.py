# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the workspace registry."""

from __future__ import annotations

from pathlib import Path

import pytest

from pkgrestore.workspace import WorkspaceRegistry


def test_workspace_is_prefixed_and_removed_after_use(workspace_parent: Path) -> None:
    registry = WorkspaceRegistry(prefix="pkgrestore.", parent=workspace_parent)

    with registry.workspace() as path:
        assert path.parent == workspace_parent
        assert path.name.startswith("pkgrestore.")
        (path / "member").write_text("x", encoding="utf-8")
        assert registry.active == frozenset({path})

    assert not path.exists()
    assert registry.active == frozenset()


def test_workspace_is_removed_when_the_body_raises(workspace_parent: Path) -> None:
    registry = WorkspaceRegistry(parent=workspace_parent)

    with pytest.raises(RuntimeError), registry.workspace() as path:
        raise RuntimeError("boom")

    assert not path.exists()
    assert list(workspace_parent.iterdir()) == []


def test_sweep_removes_only_registered_workspaces(workspace_parent: Path) -> None:
    registry = WorkspaceRegistry(prefix="pkgrestore.", parent=workspace_parent)
    foreign = workspace_parent / "pkgrestore.not-ours"
    foreign.mkdir()
    first = registry.create()
    second = registry.create()

    removed = registry.sweep()

    assert set(removed) == {first, second}
    assert not first.exists()
    assert not second.exists()
    assert foreign.exists()
    assert registry.active == frozenset()


def test_concurrent_workspaces_do_not_collide(workspace_parent: Path) -> None:
    registry = WorkspaceRegistry(parent=workspace_parent)

    paths = {registry.create() for _ in range(20)}

    assert len(paths) == 20
    registry.sweep()
