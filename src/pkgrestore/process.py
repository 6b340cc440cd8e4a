# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shell-free wrapper around the host commands pkgrestore depends on."""

from __future__ import annotations

import shutil

# Bandit: subprocess usage is intentional; commands are argument lists built
# from configuration and never pass through a shell.
import subprocess  # nosec B404
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from subprocess import CompletedProcess
from typing import Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class CommandOptions:
    """Execution options forwarded to :func:`run_command`."""

    cwd: Path | None = None
    env: Mapping[str, str] | None = None
    capture_output: bool = True
    discard_stdin: bool = True


@runtime_checkable
class RunnerCallable(Protocol):
    """Callable protocol for invoking external commands."""

    def __call__(
        self,
        cmd: Sequence[str],
        *,
        options: CommandOptions | None = None,
    ) -> CompletedProcess[str]:
        """Execute ``cmd`` and return the completed process."""

        raise NotImplementedError


def _normalize_args(args: Sequence[str]) -> list[str]:
    if not args:
        msg = "subprocess command requires at least one argument"
        raise ValueError(msg)

    head, *rest = args
    head_path = Path(head)
    if head_path.is_absolute():
        return [str(head_path), *rest]

    resolved = shutil.which(head)
    if resolved is None:
        msg = f"Executable '{head}' was not found on PATH"
        raise FileNotFoundError(msg)
    return [resolved, *rest]


def run_command(
    cmd: Sequence[str],
    *,
    options: CommandOptions | None = None,
) -> CompletedProcess[str]:
    """Execute ``cmd`` after resolving the executable on ``PATH``.

    The exit status is never checked here; callers interpret ``returncode``.
    Undecodable output bytes are replaced rather than raising.

    Raises:
        FileNotFoundError: If the executable cannot be located.
    """

    opts = options or CommandOptions()
    normalized = _normalize_args(cmd)
    # Bandit: argument lists only, no shell expansion.
    return subprocess.run(  # nosec B603
        normalized,
        cwd=str(opts.cwd) if opts.cwd is not None else None,
        env=dict(opts.env) if opts.env is not None else None,
        check=False,
        capture_output=opts.capture_output,
        text=True,
        errors="replace",
        stdin=subprocess.DEVNULL if opts.discard_stdin else None,
    )


__all__ = ["CommandOptions", "RunnerCallable", "run_command"]
