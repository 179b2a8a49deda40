"""Scanners for mounted btrfs filesystems and their subvolumes.

This module exports the mount table reader and the subvolume enumerator.
"""

from btrfs_autosnap.scanners.mounts import MountTableReader
from btrfs_autosnap.scanners.subvolumes import SubvolumeScanner, resolve_subvolume_path

__all__ = ["MountTableReader", "SubvolumeScanner", "resolve_subvolume_path"]
