"""Subvolume tools.

This module exports the tool interface and its btrfs CLI implementation.
"""

from btrfs_autosnap.tools.base import SubvolumeTool
from btrfs_autosnap.tools.btrfs import BtrfsTool

__all__ = ["BtrfsTool", "SubvolumeTool"]
