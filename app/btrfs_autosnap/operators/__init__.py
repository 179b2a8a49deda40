"""Snapshot operators.

This module exports the operators that create and prune snapshots.
"""

from btrfs_autosnap.operators.retention import RetentionPruner, map_to_snapshot_dir
from btrfs_autosnap.operators.snapshot import SnapshotCreator

__all__ = ["RetentionPruner", "SnapshotCreator", "map_to_snapshot_dir"]
