"""Snapshot naming and path layout.

Snapshots live in a fixed directory inside each subvolume and are named
``<prefix>_<label>_<YYYY-MM-DD-HHMM>``. The retention pruner recognizes a
rotation's own snapshots by the same prefix and label, accepting either
``_`` or ``-`` before the timestamp.
"""

import re
from datetime import datetime

TIMESTAMP_FORMAT = "%Y-%m-%d-%H%M"
TIMESTAMP_PATTERN = r"\d{4}-\d{2}-\d{2}-\d{4}"


def format_timestamp(now: datetime) -> str:
    """Format a datetime as used in snapshot names (e.g. 2024-03-01-1415)."""
    return now.strftime(TIMESTAMP_FORMAT)


def snapshot_name(prefix: str, label: str, now: datetime) -> str:
    """Build the snapshot name for the given rotation and time.

    Args:
        prefix: Snapshot name prefix.
        label: Rotation label.
        now: Time the snapshot is taken.

    Returns:
        Name such as ``btrfs-auto-snap_hourly_2024-03-01-1415``.
    """
    return f"{prefix}_{label}_{format_timestamp(now)}"


def snapshot_name_pattern(prefix: str, label: str) -> re.Pattern[str]:
    """Compile the pattern matching one rotation's snapshot names.

    Args:
        prefix: Snapshot name prefix.
        label: Rotation label.

    Returns:
        Compiled pattern that must match a whole basename.
    """
    return re.compile(rf"^{re.escape(prefix)}_{re.escape(label)}[_-]{TIMESTAMP_PATTERN}$")


def snapshot_dir(path: str, dir_name: str) -> str:
    """Return the snapshot directory for a subvolume path.

    Trailing separators are stripped first, so ``/`` maps to ``/.btrfs``
    and ``/data/`` to ``/data/.btrfs``.
    """
    return f"{path.rstrip('/')}/{dir_name}"


def snapshot_path(path: str, dir_name: str, name: str) -> str:
    """Return the full path of a named snapshot of a subvolume."""
    return f"{snapshot_dir(path, dir_name)}/{name}"


def collapse_slashes(path: str) -> str:
    """Collapse repeated slashes, e.g. ``//var//lib`` to ``/var/lib``."""
    return re.sub(r"/{2,}", "/", path)
