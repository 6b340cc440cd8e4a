# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Read installed-package records from the local pacman database."""

from __future__ import annotations

import gzip
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .descriptor import parse_backup
from .errors import CorruptRecord, RecordNotFound
from .models import ArtifactSet, PackageRecord

DESC_FILE: Final[str] = "desc"
FILES_FILE: Final[str] = "files"
INSTALL_FILE: Final[str] = "install"
CHANGELOG_FILE: Final[str] = "changelog"
MTREE_FILE: Final[str] = "mtree"


@dataclass(frozen=True, slots=True)
class DatabaseEntry:
    """Raw contents of one record directory."""

    record: PackageRecord
    desc: bytes
    backup: tuple[str, ...]
    artifacts: ArtifactSet

    @property
    def desc_text(self) -> str:
        return self.desc.decode("utf-8", errors="replace")


def _read_optional(path: Path) -> bytes | None:
    if not path.is_file():
        return None
    return path.read_bytes()


def _read_mtree(package: str, path: Path) -> bytes | None:
    if not path.is_file():
        return None
    try:
        with gzip.open(path, "rb") as handle:
            return handle.read()
    except (OSError, EOFError, zlib.error) as exc:
        raise CorruptRecord(package, path, str(exc)) from exc


class DatabaseReader:
    """Expose the record files of installed packages."""

    def __init__(self, db_path: Path) -> None:
        self._db_path = db_path

    def record(self, name: str, version: str) -> PackageRecord:
        return PackageRecord(name=name, version=version, db_path=self._db_path)

    def read(self, name: str, version: str) -> DatabaseEntry:
        """Return the record for ``name`` at ``version``.

        Args:
            name: Installed package name.
            version: Version reported by the package manager.

        Returns:
            DatabaseEntry: Descriptor bytes, backup list and optional artifacts.

        Raises:
            RecordNotFound: If the record directory or its ``desc`` file is missing.
            CorruptRecord: If the compressed ``mtree`` file cannot be decompressed.
        """

        record = self.record(name, version)
        record_path = record.record_path
        desc_path = record_path / DESC_FILE
        if not record_path.is_dir() or not desc_path.is_file():
            raise RecordNotFound(name, record_path)

        files_blob = _read_optional(record_path / FILES_FILE)
        backup = parse_backup(files_blob.decode("utf-8", errors="replace")) if files_blob else ()
        artifacts = ArtifactSet(
            install=_read_optional(record_path / INSTALL_FILE),
            changelog=_read_optional(record_path / CHANGELOG_FILE),
            mtree=_read_mtree(name, record_path / MTREE_FILE),
        )
        return DatabaseEntry(record=record, desc=desc_path.read_bytes(), backup=backup, artifacts=artifacts)


__all__ = ["DatabaseEntry", "DatabaseReader"]
