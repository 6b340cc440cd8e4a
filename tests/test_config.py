# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for configuration loading and overrides."""

from __future__ import annotations

from pathlib import Path

import pytest

from pkgrestore.config import CODECS, ConfigError, RestoreConfig, load_config


def test_defaults() -> None:
    config = load_config(None)

    assert config.jobs == 1
    assert config.archive.codec == "xz"
    assert config.archive.resolved_codec is CODECS["xz"]
    assert config.manager.db_path == Path("/var/lib/pacman")
    assert config.output.verbosity == 0


def test_load_config_reads_toml_sections(tmp_path: Path) -> None:
    path = tmp_path / "pkgrestore.toml"
    path.write_text(
        'jobs = 4\ndestination = "/srv/cache"\n\n[archive]\ncodec = "zst"\n\n[manager]\ndb_path = "/mnt/var/lib/pacman"\n',
        encoding="utf-8",
    )

    config = load_config(path)

    assert config.jobs == 4
    assert config.destination == Path("/srv/cache")
    assert config.archive.resolved_codec.extension == "zst"
    assert config.manager.db_path == Path("/mnt/var/lib/pacman")


@pytest.mark.parametrize(
    "content",
    ["jobs = 0\n", '[archive]\ncodec = "lz4"\n', "jobs = [\n"],
)
def test_load_config_rejects_invalid_input(tmp_path: Path, content: str) -> None:
    path = tmp_path / "bad.toml"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(path)


def test_load_config_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="unable to read"):
        load_config(tmp_path / "absent.toml")


def test_with_overrides_ignores_none_and_validates() -> None:
    config = RestoreConfig().with_overrides({"jobs": 3, "archive.codec": None, "output.verbosity": 2})

    assert config.jobs == 3
    assert config.archive.codec == "xz"
    assert config.output.verbosity == 2

    with pytest.raises(ConfigError):
        RestoreConfig().with_overrides({"archive.codec": "rar"})
    with pytest.raises(ConfigError, match="unknown configuration key"):
        RestoreConfig().with_overrides({"archive.level": 9})
