"""Allow running as ``python -m btrfs_autosnap``."""

from btrfs_autosnap.cli.main import app

app()
