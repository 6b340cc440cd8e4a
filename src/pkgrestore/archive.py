# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Assemble package archives inside isolated workspaces."""

from __future__ import annotations

import errno
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .config import ArchiveConfig
from .errors import AlreadyExists, AssemblyFailed, IncompleteAssembly
from .logging import echo, ok, warn
from .models import DESCRIPTOR_MEMBER, ArchiveDescriptor, ArtifactSet, FileManifest, PackageRecord
from .process import CommandOptions, RunnerCallable, run_command
from .workspace import WorkspaceRegistry

LIST_FILE: Final[str] = "filelist"
PERMISSION_DENIED: Final[str] = "Permission denied"


@dataclass(frozen=True, slots=True)
class AssemblyOutcome:
    """Archive moved into the destination and whether members were skipped."""

    archive: Path
    warning: IncompleteAssembly | None = None


def render_member_list(manifest: FileManifest, *, root: Path, workspace: Path) -> str:
    """Return the archiver member list for ``manifest``.

    Owned paths resolve against ``root`` and generated members against
    ``workspace``; ``-C<dir>`` lines switch between the two.
    """

    lines: list[str] = []
    generated = set(manifest.generated)
    current: Path | None = None
    for member in manifest.members:
        base = workspace if member in generated else root
        if base != current:
            lines.append(f"-C{base}")
            current = base
        lines.append(member)
    return "\n".join(lines) + "\n"


def _move_into(source: Path, target: Path) -> None:
    try:
        os.replace(source, target)
    except OSError as exc:
        if exc.errno != errno.EXDEV:
            raise
        staging = target.with_name(f".{target.name}.part")
        try:
            shutil.copyfile(source, staging)
            os.replace(staging, target)
        except BaseException:
            staging.unlink(missing_ok=True)
            raise


class ArchiveAssembler:
    """Build one compressed archive per package from a resolved manifest."""

    def __init__(
        self,
        config: ArchiveConfig,
        registry: WorkspaceRegistry,
        *,
        runner: RunnerCallable = run_command,
        generator: str | None = None,
        use_emoji: bool = True,
        use_color: bool | None = None,
    ) -> None:
        self._config = config
        self._registry = registry
        self._runner = runner
        self._generator = generator
        self._use_emoji = use_emoji
        self._use_color = use_color

    @property
    def extension(self) -> str:
        return self._config.resolved_codec.extension

    def target_path(self, record: PackageRecord, destination: Path) -> Path:
        return destination / record.archive_name(self.extension)

    def ensure_absent(self, record: PackageRecord, destination: Path) -> Path:
        """Return the target path, raising :class:`AlreadyExists` if it is taken."""

        target = self.target_path(record, destination)
        if target.exists():
            raise AlreadyExists(record.name, target)
        return target

    def build_command(self, archive: Path, list_file: Path) -> list[str]:
        """Return the archiver invocation writing ``archive`` from ``list_file``."""

        codec = self._config.resolved_codec
        return [
            self._config.executable,
            "--create",
            f"--file={archive}",
            "--no-recursion",
            "--owner=0",
            "--group=0",
            "--numeric-owner",
            "--ignore-failed-read",
            f"--use-compress-program={codec.program}",
            f"--files-from={list_file}",
        ]

    def assemble(
        self,
        record: PackageRecord,
        descriptor: ArchiveDescriptor,
        artifacts: ArtifactSet,
        manifest: FileManifest,
        destination: Path,
        *,
        verbosity: int = 0,
    ) -> AssemblyOutcome:
        """Write the archive for ``record`` into ``destination``.

        Raises:
            AlreadyExists: If the destination archive is already present.
            AssemblyFailed: If the archiver produced no output file.
        """

        target = self.ensure_absent(record, destination)
        with self._registry.workspace() as workspace:
            (workspace / DESCRIPTOR_MEMBER).write_text(
                descriptor.render(header=self._generator),
                encoding="utf-8",
            )
            for member, content in artifacts.members():
                (workspace / member).write_bytes(content)
            list_file = workspace / LIST_FILE
            list_file.write_text(
                render_member_list(manifest, root=self._config.root, workspace=workspace),
                encoding="utf-8",
            )

            archive = workspace / target.name
            cmd = self.build_command(archive, list_file)
            try:
                completed = self._runner(cmd, options=CommandOptions(cwd=workspace))
            except OSError as exc:
                raise AssemblyFailed(record.name, f"{cmd[0]}: {exc}") from exc

            diagnostics = (completed.stderr or "").splitlines()
            warning = self._report_diagnostics(record.name, diagnostics, verbosity)
            if not archive.is_file():
                raise AssemblyFailed(record.name, diagnostics[0] if diagnostics else "")
            destination.mkdir(parents=True, exist_ok=True)
            _move_into(archive, target)

        ok(f"{record.name}: created {target.name}", use_emoji=self._use_emoji, use_color=self._use_color)
        return AssemblyOutcome(archive=target, warning=warning)

    def _report_diagnostics(
        self,
        package: str,
        diagnostics: list[str],
        verbosity: int,
    ) -> IncompleteAssembly | None:
        """Echo or summarise archiver stderr once the archiver has exited.

        Diagnostics are captured and printed after the run rather than
        streamed line by line.
        """

        denied = any(PERMISSION_DENIED in line for line in diagnostics)
        warning = IncompleteAssembly(package) if denied else None
        if verbosity >= 1:
            for line in diagnostics:
                echo(line, use_color=self._use_color)
        elif warning is not None:
            warn(str(warning), use_emoji=self._use_emoji, use_color=self._use_color)
        return warning


__all__ = [
    "LIST_FILE",
    "PERMISSION_DENIED",
    "ArchiveAssembler",
    "AssemblyOutcome",
    "render_member_list",
]
