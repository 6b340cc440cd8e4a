# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for reading local database records."""

from __future__ import annotations

from pathlib import Path

import pytest
from fakes import InstalledPackage, write_record

from pkgrestore.database import DatabaseReader
from pkgrestore.errors import CorruptRecord, RecordNotFound


def test_read_returns_descriptor_and_optional_artifacts(db_path: Path) -> None:
    write_record(
        db_path,
        InstalledPackage(
            name="foo",
            version="2.0-3",
            files=["/etc/", "/etc/foo.conf"],
            install=b"post_install() { :; }\n",
            changelog=b"2.0-3: rebuild\n",
            mtree=b"#mtree\n./etc/foo.conf mode=644\n",
            backup=["etc/foo.conf"],
        ),
    )

    entry = DatabaseReader(db_path).read("foo", "2.0-3")

    assert entry.record.record_path == db_path / "local" / "foo-2.0-3"
    assert "%NAME%\nfoo" in entry.desc_text
    assert entry.backup == ("etc/foo.conf",)
    assert entry.artifacts.install == b"post_install() { :; }\n"
    assert entry.artifacts.changelog == b"2.0-3: rebuild\n"
    assert entry.artifacts.mtree == b"#mtree\n./etc/foo.conf mode=644\n"


def test_absent_artifacts_are_not_errors(db_path: Path) -> None:
    write_record(db_path, InstalledPackage(name="bar", version="1-1", files=["/usr/bin/bar"]))

    entry = DatabaseReader(db_path).read("bar", "1-1")

    assert entry.artifacts.present_members() == ()
    assert entry.backup == ()


def test_missing_record_directory_raises(db_path: Path) -> None:
    with pytest.raises(RecordNotFound) as excinfo:
        DatabaseReader(db_path).read("ghost", "1-1")

    assert excinfo.value.package == "ghost"
    assert "ghost" in str(excinfo.value)


def test_missing_desc_file_raises(db_path: Path) -> None:
    record = write_record(db_path, InstalledPackage(name="baz", version="1-1", files=[]))
    (record / "desc").unlink()

    with pytest.raises(RecordNotFound):
        DatabaseReader(db_path).read("baz", "1-1")


def test_version_mismatch_is_record_not_found(db_path: Path) -> None:
    write_record(db_path, InstalledPackage(name="qux", version="1-1", files=[]))

    with pytest.raises(RecordNotFound):
        DatabaseReader(db_path).read("qux", "1-2")


def test_truncated_mtree_raises_corrupt_record(db_path: Path) -> None:
    record = write_record(db_path, InstalledPackage(name="bad", version="1-1", files=[], mtree=b"#mtree\n" * 64))
    mtree = record / "mtree"
    mtree.write_bytes(mtree.read_bytes()[: len(mtree.read_bytes()) // 2])

    with pytest.raises(CorruptRecord) as excinfo:
        DatabaseReader(db_path).read("bad", "1-1")

    assert excinfo.value.package == "bad"
    assert str(excinfo.value).startswith("bad: corrupt database record")


def test_backup_paths_with_spaces_are_kept_whole(db_path: Path) -> None:
    write_record(
        db_path,
        InstalledPackage(name="spaced", version="1-1", files=["/etc/foo bar.conf"], backup=["etc/foo bar.conf"]),
    )

    assert DatabaseReader(db_path).read("spaced", "1-1").backup == ("etc/foo bar.conf",)
