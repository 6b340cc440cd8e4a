# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Command-line driver for the reassembly scheduler."""

from __future__ import annotations

import os
import signal
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from types import FrameType
from typing import Annotated, Final

import typer

from . import __version__
from .config import CODECS, ConfigError, RestoreConfig, load_config
from .logging import fail, ok, warn
from .models import JobStatus, ReassemblyResult
from .process import run_command
from .scheduler import ReassemblyScheduler

EXIT_FAILURE: Final[int] = 1
EXIT_CONFIG: Final[int] = 2
_HANDLED_SIGNALS: Final[tuple[signal.Signals, ...]] = (signal.SIGINT, signal.SIGTERM)

app = typer.Typer(
    name="pkgrestore",
    help="Rebuild package archives from the local pacman database.",
    add_completion=False,
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"pkgrestore {__version__}")
        raise typer.Exit()


@contextmanager
def _cancel_on_signal(
    scheduler: ReassemblyScheduler,
    *,
    use_emoji: bool,
    use_color: bool | None = None,
) -> Iterator[None]:
    """Sweep the scheduler's workspaces and exit when interrupted."""

    def _handler(signum: int, _frame: FrameType | None) -> None:
        removed = scheduler.cancel()
        warn(f"Interrupted, removed {len(removed)} workspace(s)", use_emoji=use_emoji, use_color=use_color)
        os._exit(128 + signum)

    previous = {sig: signal.signal(sig, _handler) for sig in _HANDLED_SIGNALS}
    try:
        yield
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)


def _summarize(results: list[ReassemblyResult], *, use_emoji: bool, use_color: bool | None = None) -> int:
    counts = {status: 0 for status in (JobStatus.COMPLETED, JobStatus.SKIPPED, JobStatus.FAILED)}
    for result in results:
        counts[result.status] += 1
    incomplete = sum(1 for result in results if result.warning is not None)
    summary = (
        f"{counts[JobStatus.COMPLETED]} created, {counts[JobStatus.SKIPPED]} skipped, "
        f"{counts[JobStatus.FAILED]} failed"
    )
    if incomplete:
        summary = f"{summary} ({incomplete} incomplete)"
    if counts[JobStatus.FAILED]:
        warn(summary, use_emoji=use_emoji, use_color=use_color)
        return EXIT_FAILURE
    ok(summary, use_emoji=use_emoji, use_color=use_color)
    return 0


@app.command()
def main(
    packages: Annotated[list[str], typer.Argument(help="Installed package names to reassemble.")],
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Directory receiving the archives.", file_okay=False),
    ] = None,
    jobs: Annotated[
        int | None,
        typer.Option("--jobs", "-j", min=1, help="Maximum number of packages built concurrently."),
    ] = None,
    verbose: Annotated[
        int,
        typer.Option("--verbose", "-v", count=True, help="Show archiver diagnostics."),
    ] = 0,
    codec: Annotated[
        str | None,
        typer.Option("--codec", help=f"Archive compression ({', '.join(sorted(CODECS))})."),
    ] = None,
    config_path: Annotated[
        Path | None,
        typer.Option("--config", help="TOML configuration file.", exists=True, dir_okay=False),
    ] = None,
    dbpath: Annotated[
        Path | None,
        typer.Option("--dbpath", help="Package manager database directory."),
    ] = None,
    no_emoji: Annotated[bool, typer.Option("--no-emoji", help="Disable emoji output.")] = False,
    no_color: Annotated[bool, typer.Option("--no-color", help="Disable coloured output.")] = False,
    version: Annotated[
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show the version and exit."),
    ] = False,
) -> None:
    """Reassemble PACKAGES into <name>-<version>.pkg.tar.<ext> archives."""

    del version
    try:
        config: RestoreConfig = load_config(config_path).with_overrides(
            {
                "destination": output,
                "jobs": jobs,
                "archive.codec": codec,
                "manager.db_path": dbpath,
                "output.verbosity": verbose or None,
                "output.emoji": False if no_emoji else None,
                "output.color": False if no_color else None,
            },
        )
    except ConfigError as exc:
        fail(str(exc), use_emoji=not no_emoji, use_color=False if no_color else None)
        raise typer.Exit(code=EXIT_CONFIG) from exc

    use_emoji = config.output.emoji
    use_color = None if config.output.color else False
    scheduler = ReassemblyScheduler(config, runner=run_command)
    scheduler.registry.install_exit_hook()
    with _cancel_on_signal(scheduler, use_emoji=use_emoji, use_color=use_color):
        results = scheduler.run(packages)
    raise typer.Exit(code=_summarize(results, use_emoji=use_emoji, use_color=use_color))


__all__ = ["app", "main"]
