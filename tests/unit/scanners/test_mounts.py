"""Unit tests for MountTableReader.

Tests for parsing btrfs entries out of the kernel mount table.
"""

from collections.abc import Callable
from pathlib import Path

import pytest
from btrfs_autosnap.core.errors import DiscoveryError, UnreadableMountTableError
from btrfs_autosnap.models.subvolume import MountEntry
from btrfs_autosnap.scanners.mounts import (
    MountTableReader,
    parse_subvolume_root,
    unescape_mount_field,
)


class TestMountTableReader:
    """Tests for MountTableReader class."""

    def test_default_path(self) -> None:
        """Reader defaults to /proc/mounts."""
        assert MountTableReader().path == Path("/proc/mounts")

    def test_read_keeps_only_btrfs(
        self, write_mount_table: Callable[[str], Path], mock_proc_mounts: str
    ) -> None:
        """read() maps btrfs mountpoints to their subvolume roots."""
        reader = MountTableReader(write_mount_table(mock_proc_mounts))

        assert reader.read() == {"/": "@", "/home": "@home"}

    def test_read_preserves_order(self, write_mount_table: Callable[[str], Path]) -> None:
        """Mountpoints are returned in mount table order."""
        path = write_mount_table(
            "/dev/sdb /srv btrfs rw,subvol=/srv 0 0\n/dev/sda / btrfs rw,subvol=/@ 0 0\n"
        )

        assert list(MountTableReader(path).read()) == ["/srv", "/"]

    def test_top_level_mount_has_empty_root(
        self, write_mount_table: Callable[[str], Path]
    ) -> None:
        """A mount without subvol= option, or subvol=/, maps to the top level."""
        path = write_mount_table(
            "/dev/sdb /data btrfs rw,relatime 0 0\n/dev/sdc /pool btrfs rw,subvol=/ 0 0\n"
        )

        assert MountTableReader(path).read() == {"/data": "", "/pool": ""}

    def test_later_entry_wins(self, write_mount_table: Callable[[str], Path]) -> None:
        """When a mountpoint is mounted twice, the last entry is kept."""
        path = write_mount_table(
            "/dev/sda /mnt btrfs rw,subvol=/old 0 0\n/dev/sda /mnt btrfs rw,subvol=/new 0 0\n"
        )

        assert MountTableReader(path).read() == {"/mnt": "new"}

    def test_escaped_mountpoint(self, write_mount_table: Callable[[str], Path]) -> None:
        """Octal escapes in mountpoints are decoded."""
        path = write_mount_table("/dev/sda /mnt/my\\040disk btrfs rw,subvol=/@data 0 0\n")

        assert MountTableReader(path).read() == {"/mnt/my disk": "@data"}

    def test_mountpoint_is_normalized(self, write_mount_table: Callable[[str], Path]) -> None:
        """Trailing and repeated slashes are removed from mountpoints."""
        path = write_mount_table("/dev/sda //mnt//backup/ btrfs rw 0 0\n")

        assert MountTableReader(path).read() == {"/mnt/backup": ""}

    def test_malformed_lines_are_skipped(self, write_mount_table: Callable[[str], Path]) -> None:
        """Lines with fewer than four fields and blank lines are ignored."""
        path = write_mount_table("garbage\n\n/dev/sda / btrfs\n/dev/sda /home btrfs rw 0 0\n")

        assert MountTableReader(path).read() == {"/home": ""}

    def test_no_btrfs_mounts(self, write_mount_table: Callable[[str], Path]) -> None:
        """An empty mapping is returned when nothing is btrfs."""
        path = write_mount_table("tmpfs /tmp tmpfs rw 0 0\n")

        assert MountTableReader(path).read() == {}

    def test_custom_fstype(self, write_mount_table: Callable[[str], Path]) -> None:
        """The filesystem type filter is configurable."""
        path = write_mount_table("tmpfs /tmp tmpfs rw 0 0\n/dev/sda / btrfs rw 0 0\n")

        assert MountTableReader(path, fstype="tmpfs").read() == {"/tmp": ""}

    def test_scan_yields_mount_entries(
        self, write_mount_table: Callable[[str], Path], mock_proc_mounts: str
    ) -> None:
        """scan() yields MountEntry objects."""
        entries = list(MountTableReader(write_mount_table(mock_proc_mounts)).scan())

        assert entries == [
            MountEntry(mountpoint="/", subvolume_root="@"),
            MountEntry(mountpoint="/home", subvolume_root="@home"),
        ]

    def test_unreadable_table_raises(self, tmp_path: Path) -> None:
        """A missing mount table raises UnreadableMountTableError."""
        reader = MountTableReader(tmp_path / "missing")

        with pytest.raises(UnreadableMountTableError) as exc_info:
            reader.read()

        assert exc_info.value.path == str(tmp_path / "missing")
        assert isinstance(exc_info.value, DiscoveryError)


class TestParseSubvolumeRoot:
    """Tests for parse_subvolume_root function."""

    @pytest.mark.parametrize(
        ("options", "expected"),
        [
            ("rw,noatime,subvolid=256,subvol=/@", "@"),
            ("rw,subvol=/@/var/lib", "@/var/lib"),
            ("rw,subvol=@home", "@home"),
            ("rw,subvol=/", ""),
            ("rw,relatime", ""),
            ("rw,subvolid=5", ""),
        ],
    )
    def test_parse(self, options: str, expected: str) -> None:
        """Leading and trailing slashes are stripped from subvol=."""
        assert parse_subvolume_root(options) == expected


class TestUnescapeMountField:
    """Tests for unescape_mount_field function."""

    def test_decodes_space_and_tab(self) -> None:
        """Space and tab escapes are decoded."""
        assert unescape_mount_field("/mnt/a\\040b\\011c") == "/mnt/a b\tc"

    def test_decodes_backslash(self) -> None:
        """An escaped backslash is decoded."""
        assert unescape_mount_field("/mnt/a\\134b") == "/mnt/a\\b"

    def test_plain_field_unchanged(self) -> None:
        """Fields without escapes are returned as-is."""
        assert unescape_mount_field("/var/lib") == "/var/lib"
