# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models and loading helpers for package reassembly."""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


class ConfigError(Exception):
    """Raised when configuration input is invalid."""


@dataclass(frozen=True, slots=True)
class Codec:
    """Compression program paired with the archive extension it produces."""

    extension: str
    program: str


CODECS: Final[dict[str, Codec]] = {
    "xz": Codec(extension="xz", program="xz -c -z -T0"),
    "zst": Codec(extension="zst", program="zstd -c -T0 -q"),
    "gz": Codec(extension="gz", program="gzip -c"),
    "bz2": Codec(extension="bz2", program="bzip2 -c"),
}
DEFAULT_CODEC: Final[str] = "xz"
DEFAULT_DB_PATH: Final[Path] = Path("/var/lib/pacman")
WORKSPACE_PREFIX: Final[str] = "pkgrestore."


class ManagerConfig(BaseModel):
    """Package manager executable and database location."""

    model_config = ConfigDict(validate_assignment=True)

    executable: str = "pacman"
    db_path: Path = DEFAULT_DB_PATH


class ArchiveConfig(BaseModel):
    """Archiver invocation and workspace placement."""

    model_config = ConfigDict(validate_assignment=True)

    executable: str = "tar"
    root: Path = Path("/")
    codec: str = DEFAULT_CODEC
    workspace_prefix: str = WORKSPACE_PREFIX
    workspace_dir: Path | None = None

    @field_validator("codec")
    @classmethod
    def _known_codec(cls, value: str) -> str:
        if value not in CODECS:
            supported = ", ".join(sorted(CODECS))
            raise ValueError(f"unsupported codec '{value}' (expected one of: {supported})")
        return value

    @property
    def resolved_codec(self) -> Codec:
        """Return the :class:`Codec` selected by :attr:`codec`."""

        return CODECS[self.codec]


class OutputConfig(BaseModel):
    """Console presentation settings."""

    model_config = ConfigDict(validate_assignment=True)

    verbosity: int = Field(default=0, ge=0)
    emoji: bool = True
    color: bool = True


class RestoreConfig(BaseModel):
    """Primary configuration container used by the scheduler."""

    model_config = ConfigDict(validate_assignment=True)

    manager: ManagerConfig = Field(default_factory=ManagerConfig)
    archive: ArchiveConfig = Field(default_factory=ArchiveConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    jobs: int = Field(default=1, ge=1)
    destination: Path = Field(default_factory=Path)

    def with_overrides(self, overrides: Mapping[str, Any]) -> RestoreConfig:
        """Return a copy with dotted-key ``overrides`` applied.

        Keys use ``section.field`` for nested values (``archive.codec``) or a
        bare name for top-level fields (``jobs``). ``None`` values are ignored.

        Raises:
            ConfigError: If a key is unknown or a value fails validation.
        """

        payload = self.model_dump()
        for dotted, value in overrides.items():
            if value is None:
                continue
            section, _, field = dotted.partition(".")
            if not field:
                if section not in payload:
                    raise ConfigError(f"unknown configuration key '{dotted}'")
                payload[section] = value
                continue
            target = payload.get(section)
            if not isinstance(target, dict) or field not in target:
                raise ConfigError(f"unknown configuration key '{dotted}'")
            target[field] = value
        try:
            return RestoreConfig.model_validate(payload)
        except ValidationError as exc:
            raise ConfigError(str(exc)) from exc


def load_config(path: Path | None = None) -> RestoreConfig:
    """Load configuration from the TOML file at ``path``.

    Args:
        path: TOML file to read. ``None`` returns the defaults.

    Returns:
        RestoreConfig: Validated configuration.

    Raises:
        ConfigError: If the file cannot be read, parsed, or validated.
    """

    if path is None:
        return RestoreConfig()
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"unable to read configuration file {path}: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"invalid TOML in {path}: {exc}") from exc
    try:
        return RestoreConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"invalid configuration in {path}: {exc}") from exc


__all__ = [
    "CODECS",
    "ArchiveConfig",
    "Codec",
    "ConfigError",
    "ManagerConfig",
    "OutputConfig",
    "RestoreConfig",
    "load_config",
]
