"""Persistent settings.

This module provides the settings model and I/O functions for the
optional configuration file. Settings supply defaults for the snapshot
command; command line options override them.

Settings are stored in /etc/btrfs-auto-snapshot/config.toml
"""

import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from btrfs_autosnap.core.errors import ConfigurationError
from btrfs_autosnap.core.paths import get_config_path
from btrfs_autosnap.models.config import DEFAULT_PREFIX, DEFAULT_SNAPSHOT_DIR_NAME, NAME_PATTERN
from btrfs_autosnap.scanners.mounts import DEFAULT_MOUNT_TABLE


class Settings(BaseModel):
    """Defaults read from the configuration file.

    Attributes:
        prefix: Snapshot name prefix.
        snapshot_dir_name: Snapshot directory name inside each subvolume.
        keep: Default retention count (None = never prune).
        writable: Create writable snapshots by default.
        mount_table: Mount table file to read.
        btrfs_command: btrfs executable to run.
        syslog: Also log to the system log.
        colors: Console color overrides (see ThemeColors).
    """

    model_config = ConfigDict(extra="forbid")

    prefix: Annotated[
        str,
        Field(pattern=NAME_PATTERN, description="Snapshot name prefix"),
    ] = DEFAULT_PREFIX
    snapshot_dir_name: Annotated[
        str,
        Field(min_length=1, description="Snapshot directory name"),
    ] = DEFAULT_SNAPSHOT_DIR_NAME
    keep: Annotated[
        int | None,
        Field(ge=1, description="Default number of snapshots to keep"),
    ] = None
    writable: Annotated[bool, Field(description="Create writable snapshots")] = False
    mount_table: Annotated[str, Field(description="Mount table file")] = DEFAULT_MOUNT_TABLE
    btrfs_command: Annotated[str, Field(min_length=1, description="btrfs executable")] = "btrfs"
    syslog: Annotated[bool, Field(description="Log to syslog")] = False
    colors: Annotated[
        dict[str, str],
        Field(default_factory=dict, description="Console color overrides"),
    ]

    @field_validator("snapshot_dir_name")
    @classmethod
    def validate_snapshot_dir_name(cls, v: str) -> str:
        """Reject names that would escape the subvolume."""
        if "/" in v or v in (".", ".."):
            msg = f"snapshot directory name must be a plain name, got {v!r}"
            raise ValueError(msg)
        return v


class SettingsError(ConfigurationError):
    """Raised when the configuration file cannot be read or written."""


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from a TOML file.

    A missing file is not an error: the tool works without one.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated Settings object.

    Raises:
        SettingsError: If the file is unreadable, not valid TOML, or does
            not match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        return Settings()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise SettingsError(f"Invalid TOML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise SettingsError(f"Cannot read {config_path}: {e}") from e

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise SettingsError(f"Invalid settings in {config_path}: {e}") from e


def save_settings(settings: Settings, path: Path | None = None) -> Path:
    """Save settings to a TOML file atomically.

    Args:
        settings: The settings to save.
        path: Target path. If None, uses the default config path.

    Returns:
        Path where the settings were written.

    Raises:
        SettingsError: If the file cannot be written.
    """
    config_path = path or get_config_path()
    data = settings_to_dict(settings)

    tmp_path: Path | None = None
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        # os.replace() is atomic on POSIX
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise SettingsError(f"Failed to write {config_path}: {e}") from e

    return config_path


def settings_to_dict(settings: Settings) -> dict[str, object]:
    """Convert Settings to a dictionary for TOML serialization.

    TOML has no null, so unset values are left out.

    Args:
        settings: The Settings to convert.

    Returns:
        Dictionary ready for TOML serialization.
    """
    data = settings.model_dump(exclude_none=True)
    if not data.get("colors"):
        data.pop("colors", None)
    return data
