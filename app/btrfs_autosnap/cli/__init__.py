"""CLI package for btrfs-auto-snapshot.

This package contains the Typer application and all subcommands.
"""

from btrfs_autosnap.cli.main import app

__all__ = ["app"]
