"""CLI commands for btrfs-auto-snapshot.

This package contains all subcommand implementations.
"""

from btrfs_autosnap.cli.commands import config, snapshot, snapshots, subvolumes

__all__ = ["config", "snapshot", "snapshots", "subvolumes"]
