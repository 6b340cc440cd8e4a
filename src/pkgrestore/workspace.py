# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Registry of temporary job workspaces.

Every workspace is created through a :class:`WorkspaceRegistry`, which keeps
the handles it handed out so that cancellation removes exactly those
directories and nothing else that happens to share the prefix.
"""

from __future__ import annotations

import atexit
import shutil
import tempfile
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from .config import WORKSPACE_PREFIX


def remove_path(path: Path) -> None:
    """Remove ``path`` from disk, tolerating entries that vanished already."""

    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path, ignore_errors=True)
    else:
        path.unlink(missing_ok=True)


class WorkspaceRegistry:
    """Create, track and release isolated temporary directories."""

    def __init__(self, *, prefix: str = WORKSPACE_PREFIX, parent: Path | None = None) -> None:
        self._prefix = prefix
        self._parent = parent
        self._lock = threading.Lock()
        self._active: set[Path] = set()
        self._exit_hook_installed = False

    @property
    def active(self) -> frozenset[Path]:
        """Return the workspaces currently registered."""

        with self._lock:
            return frozenset(self._active)

    def create(self) -> Path:
        """Create and register a fresh workspace directory."""

        path = Path(tempfile.mkdtemp(prefix=self._prefix, dir=self._parent))
        with self._lock:
            self._active.add(path)
        return path

    def release(self, path: Path) -> None:
        """Remove ``path`` and forget it."""

        with self._lock:
            self._active.discard(path)
        remove_path(path)

    @contextmanager
    def workspace(self) -> Iterator[Path]:
        """Yield a workspace that is removed on every exit path."""

        path = self.create()
        try:
            yield path
        finally:
            self.release(path)

    def sweep(self) -> list[Path]:
        """Remove every registered workspace and return the removed paths."""

        with self._lock:
            pending = sorted(self._active)
            self._active.clear()
        for path in pending:
            remove_path(path)
        return pending

    def install_exit_hook(self) -> None:
        """Sweep residual workspaces when the interpreter exits."""

        if self._exit_hook_installed:
            return
        atexit.register(self.sweep)
        self._exit_hook_installed = True


__all__ = ["WorkspaceRegistry", "remove_path"]
