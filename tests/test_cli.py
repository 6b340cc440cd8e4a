# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the command-line driver."""

from __future__ import annotations

import signal
from collections.abc import Callable
from pathlib import Path

import pytest
from fakes import FakeHost, InstalledPackage
from typer.testing import CliRunner

from pkgrestore import __version__
from pkgrestore.cli import _cancel_on_signal, app
from pkgrestore.config import RestoreConfig
from pkgrestore.scheduler import ReassemblyScheduler


def _args(db_path: Path, destination: Path, *extra: str) -> list[str]:
    return ["--dbpath", str(db_path), "--output", str(destination), "--no-emoji", "--no-color", *extra]


@pytest.fixture
def patched_host(host: FakeHost, monkeypatch: pytest.MonkeyPatch) -> FakeHost:
    monkeypatch.setattr("pkgrestore.cli.run_command", host)
    return host


def test_cli_reassembles_packages(
    patched_host: FakeHost,
    gzip_package: InstalledPackage,
    db_path: Path,
    destination: Path,
) -> None:
    patched_host.install(gzip_package)

    result = CliRunner().invoke(app, _args(db_path, destination, "-j", "2", "gzip"))

    assert result.exit_code == 0, result.output
    assert (destination / "gzip-1.10-1.pkg.tar.xz").is_file()
    assert "gzip: created gzip-1.10-1.pkg.tar.xz" in result.output
    assert "1 created, 0 skipped, 0 failed" in result.output


def test_cli_exits_non_zero_when_a_package_is_missing(
    patched_host: FakeHost,
    gzip_package: InstalledPackage,
    db_path: Path,
    destination: Path,
) -> None:
    patched_host.install(gzip_package)

    result = CliRunner().invoke(app, _args(db_path, destination, "gzip", "ghost"))

    assert result.exit_code == 1
    assert "ghost: package is not installed" in result.output
    assert (destination / "gzip-1.10-1.pkg.tar.xz").is_file()


def test_cli_rejects_unknown_codec(patched_host: FakeHost, db_path: Path, destination: Path) -> None:
    result = CliRunner().invoke(app, _args(db_path, destination, "--codec", "rar", "gzip"))

    assert result.exit_code == 2
    assert "unsupported codec" in result.output
    assert patched_host.calls == []


def test_cli_version() -> None:
    result = CliRunner().invoke(app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_interrupt_sweeps_workspaces_with_configured_output(
    host: FakeHost,
    make_config: Callable[..., RestoreConfig],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    scheduler = ReassemblyScheduler(make_config(), runner=host)
    leftover = scheduler.registry.create()
    warnings: list[tuple[str, dict[str, object]]] = []

    def _warn(msg: str, **kwargs: object) -> None:
        warnings.append((msg, kwargs))

    def _exit(code: int) -> None:
        raise SystemExit(code)

    monkeypatch.setattr("pkgrestore.cli.warn", _warn)
    monkeypatch.setattr("pkgrestore.cli.os._exit", _exit)

    with _cancel_on_signal(scheduler, use_emoji=False, use_color=False):
        handler = signal.getsignal(signal.SIGTERM)
        assert callable(handler)
        with pytest.raises(SystemExit) as excinfo:
            handler(signal.SIGTERM, None)

    assert excinfo.value.code == 128 + signal.SIGTERM
    assert not leftover.exists()
    assert warnings == [("Interrupted, removed 1 workspace(s)", {"use_emoji": False, "use_color": False})]
