# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Translate database ``desc`` records into archive ``.PKGINFO`` descriptors.

The local database stores metadata as ``%KEY%`` marker lines, each followed by
zero or more value lines. Archives carry the same information as flat
``key = value`` lines with a different vocabulary. Translation is a two-step
process: :func:`parse_desc` turns the record into a :class:`RawDescriptor` and
:func:`translate` maps it onto an :class:`ArchiveDescriptor`.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from enum import Enum
from types import MappingProxyType
from typing import Final

from .models import ArchiveDescriptor, DescriptorField, RawDescriptor

_MARKER: Final[re.Pattern[str]] = re.compile(r"^%([A-Za-z0-9_]+)%$")

FIELD_MAP: Final[Mapping[str, str]] = MappingProxyType(
    {
        "name": "pkgname",
        "version": "pkgver",
        "desc": "pkgdesc",
        "groups": "group",
        "depends": "depend",
        "optdepends": "optdepend",
        "conflicts": "conflict",
    },
)
INSTALL_TIME_FIELDS: Final[frozenset[str]] = frozenset({"installdate", "validation"})


class _ParserState(Enum):
    AWAITING_MARKER = "awaiting-marker"
    ACCUMULATING_VALUE = "accumulating-value"


def archive_key(marker: str) -> str:
    """Return the archive key for a database marker name.

    Lookup is case-insensitive; names missing from :data:`FIELD_MAP` pass
    through lower-cased.
    """

    folded = marker.casefold()
    return FIELD_MAP.get(folded, folded)


def parse_desc(text: str) -> RawDescriptor:
    """Parse a ``desc`` record into ordered marker/value fields.

    Blank lines are discarded first. Lines that appear before the first marker
    have no field to belong to and are dropped.
    """

    fields: list[DescriptorField] = []
    state = _ParserState.AWAITING_MARKER
    current_key: str | None = None
    current_values: list[str] = []

    for raw_line in text.splitlines():
        line = raw_line.rstrip()
        if not line.strip():
            continue
        match = _MARKER.match(line)
        if match:
            if state is _ParserState.ACCUMULATING_VALUE and current_key is not None:
                fields.append(DescriptorField(key=current_key, values=tuple(current_values)))
            current_key = match.group(1)
            current_values = []
            state = _ParserState.ACCUMULATING_VALUE
            continue
        if state is _ParserState.AWAITING_MARKER:
            continue
        current_values.append(line)

    if state is _ParserState.ACCUMULATING_VALUE and current_key is not None:
        fields.append(DescriptorField(key=current_key, values=tuple(current_values)))
    return RawDescriptor(fields=tuple(fields))


def parse_backup(text: str) -> tuple[str, ...]:
    """Return the backup paths listed after ``%BACKUP%`` in a ``files`` record.

    Each entry is ``path<TAB>checksum``; only the path is kept, spaces included.
    """

    paths: list[str] = []
    in_backup = False
    for raw_line in text.splitlines():
        if not raw_line.strip():
            continue
        match = _MARKER.match(raw_line.strip())
        if match:
            in_backup = match.group(1).casefold() == "backup"
            continue
        if in_backup:
            paths.append(raw_line.split("\t", 1)[0])
    return tuple(paths)


def translate(raw: RawDescriptor, backup: Iterable[str] = ()) -> ArchiveDescriptor:
    """Convert ``raw`` plus the ``backup`` list into archive descriptor lines."""

    source = raw.with_backup(tuple(backup))
    lines: list[tuple[str, str]] = []
    for field in source.fields:
        key = archive_key(field.key)
        lines.extend((key, value) for value in field.values)
    return ArchiveDescriptor(lines=tuple(line for line in lines if line[0] not in INSTALL_TIME_FIELDS))


def build_descriptor(desc_text: str, backup: Iterable[str] = ()) -> ArchiveDescriptor:
    """Parse and translate a ``desc`` record in one step."""

    return translate(parse_desc(desc_text), backup)


__all__ = [
    "FIELD_MAP",
    "INSTALL_TIME_FIELDS",
    "archive_key",
    "build_descriptor",
    "parse_backup",
    "parse_desc",
    "translate",
]
