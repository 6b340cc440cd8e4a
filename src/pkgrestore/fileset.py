# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Resolve the member list of a reconstructed archive."""

from __future__ import annotations

from collections.abc import Iterable

from .manager import PackageManager
from .models import DESCRIPTOR_MEMBER, ArtifactSet, FileManifest


def relative_member(path: str) -> str:
    """Return ``path`` relative to the filesystem root, keeping directory slashes."""

    return path.lstrip("/")


def build_manifest(owned: Iterable[str], artifacts: ArtifactSet) -> FileManifest:
    """Combine owned paths with the generated metadata member names.

    Generated members always start with the descriptor, followed by whichever
    optional artifacts are present.
    """

    relative = (relative_member(path) for path in owned)
    return FileManifest(
        owned=tuple(dict.fromkeys(member for member in relative if member)),
        generated=(DESCRIPTOR_MEMBER, *artifacts.present_members()),
    )


class FileSetResolver:
    """Ask the package manager which files a package owns."""

    def __init__(self, manager: PackageManager) -> None:
        self._manager = manager

    def resolve(self, package: str, artifacts: ArtifactSet) -> FileManifest:
        """Return the complete manifest for ``package``.

        Raises:
            ManagerQueryFailed: If the owned-files query errors.
        """

        return build_manifest(self._manager.owned_files(package), artifacts)


__all__ = ["FileSetResolver", "build_manifest", "relative_member"]
