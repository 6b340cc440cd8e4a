# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Queries answered by the host package manager."""

from __future__ import annotations

import shlex
from collections.abc import Sequence
from dataclasses import dataclass, field
from subprocess import CompletedProcess

from .config import ManagerConfig
from .errors import ManagerQueryFailed, PackageNotInstalled
from .process import CommandOptions, RunnerCallable, run_command


@dataclass(slots=True)
class PackageManager:
    """Thin adapter over ``pacman`` query operations."""

    config: ManagerConfig = field(default_factory=ManagerConfig)
    runner: RunnerCallable = run_command

    def _command(self, *args: str) -> list[str]:
        return [self.config.executable, "--dbpath", str(self.config.db_path), *args]

    def _run(self, package: str, cmd: Sequence[str]) -> CompletedProcess[str]:
        try:
            return self.runner(cmd, options=CommandOptions(capture_output=True, discard_stdin=True))
        except OSError as exc:
            raise ManagerQueryFailed(package, shlex.join(cmd), str(exc)) from exc

    def installed_version(self, package: str) -> str:
        """Return the installed version of ``package``.

        Raises:
            PackageNotInstalled: If the query fails or reports nothing.
            ManagerQueryFailed: If the package manager cannot be executed.
        """

        completed = self._run(package, self._command("-Q", package))
        if completed.returncode != 0:
            raise PackageNotInstalled(package)
        for line in (completed.stdout or "").splitlines():
            parts = line.split()
            if len(parts) >= 2 and parts[0] == package:
                return parts[1]
        raise PackageNotInstalled(package)

    def owned_files(self, package: str) -> list[str]:
        """Return the absolute paths owned by ``package`` in manager order.

        Directory entries keep the trailing slash the manager reports.

        Raises:
            ManagerQueryFailed: If the owned-files query errors.
        """

        cmd = self._command("-Qlq", package)
        completed = self._run(package, cmd)
        if completed.returncode != 0:
            raise ManagerQueryFailed(package, shlex.join(cmd), completed.stderr or "")
        return [line for line in (completed.stdout or "").splitlines() if line.strip()]


__all__ = ["PackageManager"]
