"""Unit tests for BtrfsTool.

Tests for the btrfs command line tool implementation.
"""

from unittest.mock import patch

import pytest
from btrfs_autosnap.core.errors import (
    OperationError,
    SubvolumeNotFoundError,
    SubvolumeToolError,
    SubvolumeVanishedError,
)
from btrfs_autosnap.models.subvolume import SnapshotRecord
from btrfs_autosnap.tools.btrfs import BtrfsTool
from btrfs_autosnap.utils.shell import CommandResult

SUBVOLUME_LIST_OUTPUT = """\
ID 258 gen 1402 top level 256 path @/var/lib/portables
ID 259 gen 1399 top level 256 path @/var/lib/machines
ID 300 gen 1500 top level 256 path @/srv/my data
"""

SNAPSHOT_LIST_OUTPUT = """\
ID 312 gen 1550 cgen 1550 top level 256 otime 2024-03-01 14:15:00 path @/.btrfs/btrfs-auto-snap_hourly_2024-03-01-1415
ID 305 gen 1480 cgen 1480 top level 256 otime 2024-03-01 13:15:00 path @/.btrfs/btrfs-auto-snap_hourly_2024-03-01-1315

garbage line
"""

SHOW_LIVE_OUTPUT = """\
@/var/lib/machines
\tName: \t\t\tmachines
\tUUID: \t\t\t6b3c5e5e-1a7a-4a4f-8c5e-0cbbd6d7f5d3
\tParent UUID: \t\t-
\tReceived UUID: \t\t-
\tCreation time: \t\t2024-01-10 09:12:44 +0100
\tSubvolume ID: \t\t259
\tGeneration: \t\t1399
\tFlags: \t\t\t-
"""

SHOW_SNAPSHOT_OUTPUT = """\
@/.btrfs/btrfs-auto-snap_hourly_2024-03-01-1415
\tName: \t\t\tbtrfs-auto-snap_hourly_2024-03-01-1415
\tUUID: \t\t\t0d4f2a1c-5b11-4c7e-9a53-f1a0d8c2b6e9
\tParent UUID: \t\t2f1c9c0e-7a4b-4e43-9d55-8a1f5f0b1c2d
\tReceived UUID: \t\t-
\tFlags: \t\t\treadonly
"""


def _ok(stdout: str = "") -> CommandResult:
    return CommandResult(stdout=stdout, stderr="", returncode=0)


class TestBtrfsTool:
    """Tests for BtrfsTool class."""

    @pytest.fixture
    def tool(self) -> BtrfsTool:
        """Create BtrfsTool instance."""
        return BtrfsTool()

    def test_default_command(self, tool: BtrfsTool) -> None:
        """Tool runs 'btrfs' by default."""
        assert tool.command == "btrfs"

    def test_is_available_with_btrfs(self, tool: BtrfsTool) -> None:
        """is_available returns True when btrfs exists."""
        with patch("btrfs_autosnap.tools.btrfs.command_exists", return_value=True):
            assert tool.is_available() is True

    def test_is_available_without_btrfs(self, tool: BtrfsTool) -> None:
        """is_available returns False when btrfs is missing."""
        with patch("btrfs_autosnap.tools.btrfs.command_exists", return_value=False):
            assert tool.is_available() is False

    def test_is_available_checks_configured_command(self) -> None:
        """is_available looks up the configured executable."""
        tool = BtrfsTool("/usr/local/sbin/btrfs")
        with patch("btrfs_autosnap.tools.btrfs.command_exists", return_value=True) as mock_exists:
            tool.is_available()

        mock_exists.assert_called_once_with("/usr/local/sbin/btrfs")


class TestListSubvolumes:
    """Tests for BtrfsTool.list_subvolumes."""

    def test_parses_paths(self) -> None:
        """Paths are taken from the trailing path field, spaces included."""
        with patch("btrfs_autosnap.tools.btrfs.run_command") as mock_run:
            mock_run.return_value = _ok(SUBVOLUME_LIST_OUTPUT)

            paths = BtrfsTool().list_subvolumes("/")

        assert paths == ["@/var/lib/portables", "@/var/lib/machines", "@/srv/my data"]
        mock_run.assert_called_once_with(["btrfs", "subvolume", "list", "-o", "/"])

    def test_unrecognized_lines_give_empty_paths(self) -> None:
        """Lines without a path field are returned as empty strings."""
        with patch("btrfs_autosnap.tools.btrfs.run_command") as mock_run:
            mock_run.return_value = _ok("\nID 1 gen 2\n")

            assert BtrfsTool().list_subvolumes("/data") == ["", ""]

    def test_failure_raises_tool_error(self) -> None:
        """A nonzero exit raises SubvolumeToolError."""
        with patch("btrfs_autosnap.tools.btrfs.run_command") as mock_run:
            mock_run.return_value = CommandResult(
                stdout="", stderr="ERROR: not a btrfs filesystem: /tmp", returncode=1
            )

            with pytest.raises(SubvolumeToolError, match="not a btrfs filesystem"):
                BtrfsTool().list_subvolumes("/tmp")

    def test_missing_executable_raises_tool_error(self) -> None:
        """An executable that cannot be started raises SubvolumeToolError."""
        with patch("btrfs_autosnap.tools.btrfs.run_command", side_effect=FileNotFoundError()):
            with pytest.raises(SubvolumeToolError, match="Cannot run btrfs"):
                BtrfsTool().list_subvolumes("/")


class TestShowSubvolume:
    """Tests for BtrfsTool.show_subvolume."""

    def test_live_subvolume(self) -> None:
        """A '-' parent UUID and empty flags give a live subvolume."""
        with patch("btrfs_autosnap.tools.btrfs.run_command") as mock_run:
            mock_run.return_value = _ok(SHOW_LIVE_OUTPUT)

            info = BtrfsTool().show_subvolume("/var/lib/machines")

        assert info.parent_uuid is None
        assert info.read_only is False
        mock_run.assert_called_once_with(["btrfs", "subvolume", "show", "/var/lib/machines"])

    def test_snapshot(self) -> None:
        """Parent UUID and readonly flag are parsed."""
        with patch("btrfs_autosnap.tools.btrfs.run_command") as mock_run:
            mock_run.return_value = _ok(SHOW_SNAPSHOT_OUTPUT)

            info = BtrfsTool().show_subvolume("/.btrfs/btrfs-auto-snap_hourly_2024-03-01-1415")

        assert info.parent_uuid == "2f1c9c0e-7a4b-4e43-9d55-8a1f5f0b1c2d"
        assert info.has_parent is True
        assert info.read_only is True

    def test_missing_fields_default_to_live(self) -> None:
        """Output without parent or flags fields is treated as live."""
        with patch("btrfs_autosnap.tools.btrfs.run_command") as mock_run:
            mock_run.return_value = _ok("/\n\tName: \t\t\t<FS_TREE>\n")

            info = BtrfsTool().show_subvolume("/")

        assert info.has_parent is False
        assert info.read_only is False

    def test_failure_raises_tool_error(self) -> None:
        """A nonzero exit on an existing path raises SubvolumeToolError."""
        with (
            patch("btrfs_autosnap.tools.btrfs.run_command") as mock_run,
            patch("btrfs_autosnap.tools.btrfs.os.path.lexists", return_value=True),
        ):
            mock_run.return_value = CommandResult(stdout="", stderr="", returncode=1)

            with pytest.raises(SubvolumeToolError) as exc_info:
                BtrfsTool().show_subvolume("/srv")

        assert not isinstance(exc_info.value, SubvolumeVanishedError)

    def test_vanished_path(self) -> None:
        """A failed query on a path that no longer exists raises SubvolumeVanishedError."""
        path = "/.btrfs/btrfs-auto-snap_hourly_2024-03-01-1300"
        with (
            patch("btrfs_autosnap.tools.btrfs.run_command") as mock_run,
            patch("btrfs_autosnap.tools.btrfs.os.path.lexists", return_value=False),
        ):
            mock_run.return_value = CommandResult(
                stdout="", stderr=f"ERROR: cannot find {path}", returncode=1
            )

            with pytest.raises(SubvolumeVanishedError) as exc_info:
                BtrfsTool().show_subvolume(path)

        assert exc_info.value.path == path
        assert "cannot find" in exc_info.value.reason


class TestListSnapshots:
    """Tests for BtrfsTool.list_snapshots."""

    def test_parses_records(self) -> None:
        """Generation and path are parsed, malformed lines skipped."""
        with patch("btrfs_autosnap.tools.btrfs.run_command") as mock_run:
            mock_run.return_value = _ok(SNAPSHOT_LIST_OUTPUT)

            records = BtrfsTool().list_snapshots("/")

        assert records == [
            SnapshotRecord(path="@/.btrfs/btrfs-auto-snap_hourly_2024-03-01-1415", generation=1550),
            SnapshotRecord(path="@/.btrfs/btrfs-auto-snap_hourly_2024-03-01-1315", generation=1480),
        ]

    def test_command_line(self) -> None:
        """Snapshots are listed with generation, sorted newest first."""
        with patch("btrfs_autosnap.tools.btrfs.run_command") as mock_run:
            mock_run.return_value = _ok()

            BtrfsTool().list_snapshots("/home")

        mock_run.assert_called_once_with(
            ["btrfs", "subvolume", "list", "-o", "-s", "-g", "--sort=-gen", "/home"]
        )


class TestCreateSnapshot:
    """Tests for BtrfsTool.create_snapshot."""

    def test_read_only_by_default(self) -> None:
        """Snapshots are created read-only unless writable is set."""
        with patch("btrfs_autosnap.tools.btrfs.run_command") as mock_run:
            mock_run.return_value = _ok()

            BtrfsTool().create_snapshot("/home", "/home/.btrfs/snap")

        mock_run.assert_called_once_with(
            ["btrfs", "subvolume", "snapshot", "-r", "--", "/home", "/home/.btrfs/snap"]
        )

    def test_writable(self) -> None:
        """Writable snapshots omit the -r flag."""
        with patch("btrfs_autosnap.tools.btrfs.run_command") as mock_run:
            mock_run.return_value = _ok()

            BtrfsTool().create_snapshot("/home", "/home/.btrfs/snap", writable=True)

        args = mock_run.call_args[0][0]
        assert "-r" not in args

    def test_failure_raises_operation_error(self) -> None:
        """A failed snapshot raises OperationError carrying stderr."""
        with patch("btrfs_autosnap.tools.btrfs.run_command") as mock_run:
            mock_run.return_value = CommandResult(
                stdout="",
                stderr="ERROR: cannot snapshot '/home': Read-only file system",
                returncode=1,
            )

            with pytest.raises(OperationError) as exc_info:
                BtrfsTool().create_snapshot("/home", "/home/.btrfs/snap")

        assert exc_info.value.path == "/home/.btrfs/snap"
        assert "Read-only file system" in exc_info.value.reason

    def test_missing_executable_raises_operation_error(self) -> None:
        """An executable that cannot be started raises OperationError."""
        with patch("btrfs_autosnap.tools.btrfs.run_command", side_effect=PermissionError()):
            with pytest.raises(OperationError, match="Cannot run btrfs"):
                BtrfsTool().create_snapshot("/home", "/home/.btrfs/snap")


class TestDeleteSubvolume:
    """Tests for BtrfsTool.delete_subvolume."""

    def test_delete(self) -> None:
        """Existing subvolumes are deleted with 'subvolume delete'."""
        with (
            patch("btrfs_autosnap.tools.btrfs.os.path.lexists", return_value=True),
            patch("btrfs_autosnap.tools.btrfs.run_command") as mock_run,
        ):
            mock_run.return_value = _ok("Delete subvolume (no-commit): '/home/.btrfs/snap'\n")

            BtrfsTool().delete_subvolume("/home/.btrfs/snap")

        mock_run.assert_called_once_with(
            ["btrfs", "subvolume", "delete", "--", "/home/.btrfs/snap"]
        )

    def test_missing_path_raises_not_found(self) -> None:
        """A path that does not exist raises SubvolumeNotFoundError without running btrfs."""
        with (
            patch("btrfs_autosnap.tools.btrfs.os.path.lexists", return_value=False),
            patch("btrfs_autosnap.tools.btrfs.run_command") as mock_run,
        ):
            with pytest.raises(SubvolumeNotFoundError):
                BtrfsTool().delete_subvolume("/home/.btrfs/snap")

        mock_run.assert_not_called()

    def test_vanished_during_delete_raises_not_found(self) -> None:
        """A path removed concurrently is reported as not found."""
        with (
            patch("btrfs_autosnap.tools.btrfs.os.path.lexists", side_effect=[True, False]),
            patch("btrfs_autosnap.tools.btrfs.run_command") as mock_run,
        ):
            mock_run.return_value = CommandResult(
                stdout="",
                stderr="ERROR: cannot access /home/.btrfs/snap: No such file or directory",
                returncode=1,
            )

            with pytest.raises(SubvolumeNotFoundError):
                BtrfsTool().delete_subvolume("/home/.btrfs/snap")

    def test_failure_raises_operation_error(self) -> None:
        """Other failures raise OperationError, not SubvolumeNotFoundError."""
        with (
            patch("btrfs_autosnap.tools.btrfs.os.path.lexists", return_value=True),
            patch("btrfs_autosnap.tools.btrfs.run_command") as mock_run,
        ):
            mock_run.return_value = CommandResult(
                stdout="",
                stderr="ERROR: Could not destroy subvolume: Permission denied",
                returncode=1,
            )

            with pytest.raises(OperationError) as exc_info:
                BtrfsTool().delete_subvolume("/home/.btrfs/snap")

        assert not isinstance(exc_info.value, SubvolumeNotFoundError)
        assert "Permission denied" in exc_info.value.reason
