"""Path management for btrfs-auto-snapshot.

The tool runs as root from cron or systemd timers, so its configuration
lives under /etc rather than in a user's XDG directories.

Defaults:
- Config: /etc/btrfs-auto-snapshot/config.toml
- Override: $BTRFS_AUTO_SNAPSHOT_CONFIG
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "btrfs-auto-snapshot"

CONFIG_ENV_VAR = "BTRFS_AUTO_SNAPSHOT_CONFIG"
SYSTEM_CONFIG_DIR = Path("/etc") / APP_NAME


def get_config_path() -> Path:
    """Get the configuration file path.

    Returns:
        $BTRFS_AUTO_SNAPSHOT_CONFIG if set, else /etc/btrfs-auto-snapshot/config.toml.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override)
    return SYSTEM_CONFIG_DIR / "config.toml"
