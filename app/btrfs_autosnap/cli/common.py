"""Shared helpers for CLI commands.

Provides access to the settings loaded by the main callback, the
subvolume tool factory, and the mapping of fatal errors to exit codes.
"""

import contextlib
from collections.abc import Iterator
from pathlib import Path

import typer

from btrfs_autosnap.core.errors import (
    AutoSnapshotError,
    ConfigurationError,
    DiscoveryError,
    PathValidationError,
)
from btrfs_autosnap.core.paths import get_config_path
from btrfs_autosnap.core.settings import Settings
from btrfs_autosnap.tools.base import SubvolumeTool
from btrfs_autosnap.tools.btrfs import BtrfsTool
from btrfs_autosnap.utils.formatting import print_error

# Exit codes: 1 is reserved for runs where a snapshot operation failed
EXIT_OPERATION_FAILED = 1
EXIT_INVALID = 2
EXIT_DISCOVERY_FAILED = 3


def get_settings(ctx: typer.Context) -> Settings:
    """Return the settings loaded by the main callback."""
    obj = ctx.find_root().obj
    if isinstance(obj, dict) and isinstance(obj.get("settings"), Settings):
        return obj["settings"]
    return Settings()


def get_config_file(ctx: typer.Context) -> Path:
    """Return the configuration file chosen by the main callback."""
    obj = ctx.find_root().obj
    if isinstance(obj, dict) and isinstance(obj.get("config_path"), Path):
        return obj["config_path"]
    return get_config_path()


def is_quiet(ctx: typer.Context) -> bool:
    """Check if console output should be suppressed."""
    obj = ctx.find_root().obj
    return bool(isinstance(obj, dict) and obj.get("quiet"))


def create_tool(settings: Settings) -> SubvolumeTool:
    """Create the subvolume tool for the configured btrfs command."""
    return BtrfsTool(settings.btrfs_command)


def exit_code_for(error: AutoSnapshotError) -> int:
    """Map a fatal error to a process exit code."""
    if isinstance(error, ConfigurationError | PathValidationError):
        return EXIT_INVALID
    if isinstance(error, DiscoveryError):
        return EXIT_DISCOVERY_FAILED
    return EXIT_OPERATION_FAILED


@contextlib.contextmanager
def handle_errors() -> Iterator[None]:
    """Print fatal errors and exit with the matching code.

    Raises:
        typer.Exit: For any AutoSnapshotError raised inside the block.
    """
    try:
        yield
    except AutoSnapshotError as e:
        print_error(str(e))
        raise typer.Exit(code=exit_code_for(e)) from e
