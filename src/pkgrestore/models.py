# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Data model shared by the reassembly pipeline."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Final

from .errors import IncompleteAssembly

DESCRIPTOR_MEMBER: Final[str] = ".PKGINFO"
INSTALL_MEMBER: Final[str] = ".INSTALL"
CHANGELOG_MEMBER: Final[str] = ".CHANGELOG"
MTREE_MEMBER: Final[str] = ".MTREE"


@dataclass(frozen=True, slots=True)
class PackageRecord:
    """Installed package identified by name and resolved version."""

    name: str
    version: str
    db_path: Path

    @property
    def record_path(self) -> Path:
        """Return the local database directory for this exact name and version."""

        return self.db_path / "local" / f"{self.name}-{self.version}"

    @property
    def archive_stem(self) -> str:
        return f"{self.name}-{self.version}"

    def archive_name(self, extension: str) -> str:
        """Return ``<name>-<version>.pkg.tar.<extension>``."""

        return f"{self.archive_stem}.pkg.tar.{extension}"


@dataclass(frozen=True, slots=True)
class DescriptorField:
    """A ``%KEY%`` marker and the value lines that followed it."""

    key: str
    values: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class RawDescriptor:
    """Fields parsed from a database ``desc`` record, in file order."""

    fields: tuple[DescriptorField, ...] = ()

    def with_backup(self, backup: tuple[str, ...]) -> RawDescriptor:
        """Return a copy with ``backup`` appended as a synthetic field."""

        if not backup:
            return self
        return RawDescriptor(fields=(*self.fields, DescriptorField(key="BACKUP", values=backup)))


@dataclass(frozen=True, slots=True)
class ArchiveDescriptor:
    """Ordered ``key = value`` lines of an archive ``.PKGINFO``."""

    lines: tuple[tuple[str, str], ...] = ()

    def values(self, key: str) -> list[str]:
        return [value for line_key, value in self.lines if line_key == key]

    def keys(self) -> set[str]:
        return {key for key, _ in self.lines}

    def render(self, header: str | None = None) -> str:
        """Return the descriptor as text, optionally preceded by a comment header."""

        body = [f"{key} = {value}" for key, value in self.lines]
        if header:
            body.insert(0, f"# {header}")
        return "\n".join(body) + "\n"


@dataclass(frozen=True, slots=True)
class ArtifactSet:
    """Optional metadata members present in the database record."""

    install: bytes | None = None
    changelog: bytes | None = None
    mtree: bytes | None = None

    def members(self) -> Iterator[tuple[str, bytes]]:
        """Yield ``(member name, content)`` for each present artifact in archive order."""

        for name, content in (
            (INSTALL_MEMBER, self.install),
            (CHANGELOG_MEMBER, self.changelog),
            (MTREE_MEMBER, self.mtree),
        ):
            if content is not None:
                yield name, content

    def present_members(self) -> tuple[str, ...]:
        return tuple(name for name, _ in self.members())


@dataclass(frozen=True, slots=True)
class FileManifest:
    """Owned filesystem paths plus generated metadata members.

    ``owned`` holds paths relative to the filesystem root; ``generated`` holds
    member names written into the job workspace.
    """

    owned: tuple[str, ...] = ()
    generated: tuple[str, ...] = ()

    @property
    def members(self) -> tuple[str, ...]:
        return tuple(dict.fromkeys((*self.owned, *self.generated)))


class JobStatus(str, Enum):
    """Lifecycle states of a reassembly job."""

    QUEUED = "queued"
    RUNNING = "running"
    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in {JobStatus.COMPLETED, JobStatus.SKIPPED, JobStatus.FAILED}


@dataclass(frozen=True, slots=True)
class ReassemblyJob:
    """One package request submitted to the scheduler."""

    package: str
    destination: Path
    verbosity: int = 0


@dataclass(slots=True)
class ReassemblyResult:
    """Terminal outcome of a single job."""

    package: str
    status: JobStatus
    archive: Path | None = None
    reason: str | None = None
    warning: IncompleteAssembly | None = None
    version: str | None = None
    not_installed: bool = False

    @property
    def ok(self) -> bool:
        return self.status in {JobStatus.COMPLETED, JobStatus.SKIPPED}


__all__ = [
    "CHANGELOG_MEMBER",
    "DESCRIPTOR_MEMBER",
    "INSTALL_MEMBER",
    "MTREE_MEMBER",
    "ArchiveDescriptor",
    "ArtifactSet",
    "DescriptorField",
    "FileManifest",
    "JobStatus",
    "PackageRecord",
    "RawDescriptor",
    "ReassemblyJob",
    "ReassemblyResult",
]
