# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Job-scoped error taxonomy raised while reassembling a package."""

from __future__ import annotations

from pathlib import Path


class ReassemblyError(Exception):
    """Base class for failures confined to a single package job."""

    def __init__(self, package: str, message: str) -> None:
        super().__init__(message)
        self.package = package


class PackageNotInstalled(ReassemblyError):
    """Raised when the package manager cannot resolve an installed version."""

    def __init__(self, package: str) -> None:
        super().__init__(package, f"{package}: package is not installed")


class RecordNotFound(ReassemblyError):
    """Raised when the local database holds no record for ``name-version``."""

    def __init__(self, package: str, record_path: Path) -> None:
        super().__init__(package, f"{package}: no local database record at {record_path}")
        self.record_path = record_path


class CorruptRecord(ReassemblyError):
    """Raised when a file in the local database record cannot be decoded."""

    def __init__(self, package: str, path: Path, detail: str) -> None:
        super().__init__(package, f"{package}: corrupt database record {path}: {detail}")
        self.path = path


class ManagerQueryFailed(ReassemblyError):
    """Raised when a package manager query exits unsuccessfully."""

    def __init__(self, package: str, command: str, detail: str) -> None:
        detail = detail.strip() or "<no output>"
        super().__init__(package, f"{package}: '{command}' failed: {detail}")
        self.command = command
        self.detail = detail


class AssemblyFailed(ReassemblyError):
    """Raised when the archiver finished without producing an archive."""

    def __init__(self, package: str, detail: str = "") -> None:
        message = f"{package}: internal error, archive was not created"
        if detail.strip():
            message = f"{message} ({detail.strip()})"
        super().__init__(package, message)


class AlreadyExists(ReassemblyError):
    """Raised before any work when the destination archive is already present."""

    def __init__(self, package: str, archive: Path) -> None:
        super().__init__(package, f"{package}: {archive.name} already exists")
        self.archive = archive


class IncompleteAssembly(UserWarning):
    """Attached to a completed result when unreadable members were skipped."""

    def __init__(self, package: str) -> None:
        super().__init__(f"{package}: permission denied on some files, archive is incomplete")
        self.package = package


__all__ = [
    "AlreadyExists",
    "AssemblyFailed",
    "CorruptRecord",
    "IncompleteAssembly",
    "ManagerQueryFailed",
    "PackageNotInstalled",
    "ReassemblyError",
    "RecordNotFound",
]
