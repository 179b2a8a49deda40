"""btrfs-auto-snapshot: periodic btrfs snapshots with label-based retention."""

__version__ = "0.1.0"
