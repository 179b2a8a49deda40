"""Data models for btrfs-auto-snapshot.

This module exports the core data structures used throughout the application.
"""

from btrfs_autosnap.models.action import RunReport, SnapshotActionResult, SnapshotActionType
from btrfs_autosnap.models.config import (
    ALL_SUBVOLUMES,
    DEFAULT_PREFIX,
    DEFAULT_SNAPSHOT_DIR_NAME,
    SnapshotConfig,
    create_snapshot_config,
)
from btrfs_autosnap.models.subvolume import (
    CandidateSubvolume,
    DiscoveredSubvolume,
    MountEntry,
    SnapshotRecord,
    SubvolumeInfo,
)

__all__ = [
    "ALL_SUBVOLUMES",
    "DEFAULT_PREFIX",
    "DEFAULT_SNAPSHOT_DIR_NAME",
    "CandidateSubvolume",
    "DiscoveredSubvolume",
    "MountEntry",
    "RunReport",
    "SnapshotActionResult",
    "SnapshotActionType",
    "SnapshotConfig",
    "SnapshotRecord",
    "SubvolumeInfo",
    "create_snapshot_config",
]
