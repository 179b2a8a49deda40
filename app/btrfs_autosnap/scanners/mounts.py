"""Mount table reader.

Parses the kernel mount table into btrfs mount entries, mapping each
mountpoint to the subvolume path (relative to the filesystem's top
level) that is mounted there.
"""

import logging
import os
import re
from collections.abc import Iterator
from pathlib import Path

from btrfs_autosnap.core.errors import UnreadableMountTableError
from btrfs_autosnap.models.subvolume import MountEntry

logger = logging.getLogger(__name__)

DEFAULT_MOUNT_TABLE = "/proc/mounts"
BTRFS_FSTYPE = "btrfs"

# Mount table fields escape space, tab, newline and backslash as octal
_OCTAL_ESCAPE_RE = re.compile(r"\\([0-7]{3})")


class MountTableReader:
    """Reader for btrfs entries of the mount table.

    Attributes:
        path: Mount table file, /proc/mounts by default.
        fstype: Filesystem type to keep.
    """

    def __init__(self, path: str | Path = DEFAULT_MOUNT_TABLE, fstype: str = BTRFS_FSTYPE) -> None:
        """Initialize the reader.

        Args:
            path: Mount table file to parse.
            fstype: Filesystem type whose entries are kept.
        """
        self._path = Path(path)
        self._fstype = fstype

    @property
    def path(self) -> Path:
        """Return the mount table path."""
        return self._path

    def read(self) -> dict[str, str]:
        """Read the mount table as a mapping of mountpoint to subvolume root.

        A later entry for the same mountpoint replaces an earlier one,
        since the last mount on a path is the visible one.

        Returns:
            Ordered mapping of mountpoint to subvolume root. Empty when
            no entry of the filesystem type exists.

        Raises:
            UnreadableMountTableError: If the mount table cannot be read.
        """
        mounts: dict[str, str] = {}
        for entry in self.scan():
            mounts[entry.mountpoint] = entry.subvolume_root
        return mounts

    def scan(self) -> Iterator[MountEntry]:
        """Yield a MountEntry for every mount of the filesystem type.

        Raises:
            UnreadableMountTableError: If the mount table cannot be read.
        """
        try:
            content = self._path.read_text(encoding="utf-8", errors="surrogateescape")
        except OSError as e:
            raise UnreadableMountTableError(str(self._path), e.strerror or str(e)) from e

        for line in content.splitlines():
            if not line.strip():
                continue

            entry = self._parse_line(line)
            if entry is not None:
                yield entry

    def _parse_line(self, line: str) -> MountEntry | None:
        """Parse one mount table line.

        Args:
            line: ``device mountpoint fstype options dump pass`` line.

        Returns:
            MountEntry for matching filesystem types, None otherwise.
        """
        parts = line.split()
        if len(parts) < 4:
            logger.debug("Skipping malformed mount line (parts=%d): %r", len(parts), line[:200])
            return None

        mountpoint, fstype, options = parts[1], parts[2], parts[3]
        if fstype != self._fstype:
            return None

        mountpoint = os.path.normpath(unescape_mount_field(mountpoint))
        if not mountpoint.startswith("/"):
            logger.debug("Skipping relative mountpoint: %r", mountpoint)
            return None
        # normpath keeps a leading "//" as POSIX allows
        if mountpoint.startswith("//"):
            mountpoint = "/" + mountpoint.lstrip("/")

        return MountEntry(mountpoint=mountpoint, subvolume_root=parse_subvolume_root(options))


def parse_subvolume_root(options: str) -> str:
    """Extract the ``subvol=`` mount option without its leading slash.

    Args:
        options: Comma-separated mount options.

    Returns:
        Subvolume path relative to the top level, "" when the option is
        missing or names the top level itself.
    """
    for option in options.split(","):
        key, sep, value = option.partition("=")
        if key == "subvol" and sep:
            return unescape_mount_field(value).strip("/")
    return ""


def unescape_mount_field(field: str) -> str:
    """Decode ``\\040``-style octal escapes used in mount table fields."""
    return _OCTAL_ESCAPE_RE.sub(lambda m: chr(int(m.group(1), 8)), field)
