"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules, most
importantly an in-memory subvolume tool that records every mutation.
"""

from collections.abc import Callable, Iterator
from datetime import datetime
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from btrfs_autosnap.core.errors import (
    OperationError,
    SubvolumeNotFoundError,
    SubvolumeToolError,
    SubvolumeVanishedError,
)
from btrfs_autosnap.models.subvolume import SnapshotRecord, SubvolumeInfo
from btrfs_autosnap.tools.base import SubvolumeTool


class FakeSubvolumeTool(SubvolumeTool):
    """In-memory subvolume tool.

    Snapshots are stored per source subvolume as tree-relative paths, the
    way ``btrfs subvolume list`` reports them. New snapshots get the next
    generation number.
    """

    def __init__(self) -> None:
        self.available = True
        self.listings: dict[str, list[str]] = {}
        self.infos: dict[str, SubvolumeInfo] = {}
        self.snapshots: dict[str, list[SnapshotRecord]] = {}
        self.tree_roots: dict[str, str] = {}
        self.existing: set[str] = set()
        self.locations: dict[str, tuple[str, SnapshotRecord]] = {}
        self.generation = 100
        self.fail_create: set[str] = set()
        self.fail_delete: set[str] = set()
        self.fail_list_snapshots: set[str] = set()
        self.vanished: set[str] = set()
        self.created: list[tuple[str, str, bool]] = []
        self.deleted: list[str] = []
        self.delete_attempts: list[str] = []
        self.show_calls: list[str] = []

    # -- setup helpers -------------------------------------------------------

    def add_subvolume(self, mountpoint: str, rel: str, path: str, info: SubvolumeInfo) -> None:
        """Register a subvolume listed below ``mountpoint`` and reachable at ``path``."""
        self.listings.setdefault(mountpoint, []).append(rel)
        self.infos[path] = info

    def add_snapshot(
        self, source: str, rel: str, generation: int, absolute: str | None = None
    ) -> None:
        """Register an existing snapshot of ``source``, optionally present at ``absolute``."""
        record = SnapshotRecord(path=rel, generation=generation)
        self.snapshots.setdefault(source, []).append(record)
        if absolute is not None:
            self.existing.add(absolute)
            self.locations[absolute] = (source, record)

    # -- SubvolumeTool -------------------------------------------------------

    def is_available(self) -> bool:
        return self.available

    def list_subvolumes(self, path: str) -> list[str]:
        return list(self.listings.get(path, []))

    def show_subvolume(self, path: str) -> SubvolumeInfo:
        self.show_calls.append(path)
        if path in self.vanished:
            raise SubvolumeVanishedError(path, f"ERROR: cannot find {path}")
        if path not in self.infos:
            raise SubvolumeToolError(f"ERROR: cannot find {path}")
        return self.infos[path]

    def list_snapshots(self, path: str) -> list[SnapshotRecord]:
        if path in self.fail_list_snapshots:
            raise SubvolumeToolError(f"ERROR: can't list {path}")
        return sorted(self.snapshots.get(path, []), key=lambda r: r.generation, reverse=True)

    def create_snapshot(self, source: str, destination: str, writable: bool = False) -> None:
        if source in self.fail_create:
            msg = "ERROR: Could not create subvolume: Read-only file system"
            raise OperationError(destination, msg)
        if destination in self.existing:
            raise OperationError(destination, "ERROR: target path already exists")
        self.generation += 1
        rel = self.tree_roots.get(source, "") + destination[len(source.rstrip("/")) :]
        record = SnapshotRecord(path=rel.lstrip("/"), generation=self.generation)
        self.snapshots.setdefault(source, []).append(record)
        self.existing.add(destination)
        self.locations[destination] = (source, record)
        self.created.append((source, destination, writable))

    def delete_subvolume(self, path: str) -> None:
        self.delete_attempts.append(path)
        if path in self.fail_delete:
            raise OperationError(path, "ERROR: Could not destroy subvolume: Permission denied")
        if path not in self.existing:
            raise SubvolumeNotFoundError(path, "No such file or directory")
        self.existing.discard(path)
        if path in self.locations:
            source, record = self.locations.pop(path)
            self.snapshots[source].remove(record)
        self.deleted.append(path)


@pytest.fixture
def fake_tool() -> FakeSubvolumeTool:
    """Create an empty in-memory subvolume tool."""
    return FakeSubvolumeTool()


@pytest.fixture
def live_info() -> SubvolumeInfo:
    """Metadata of a plain, writable subvolume without parent."""
    return SubvolumeInfo(parent_uuid=None, read_only=False)


@pytest.fixture
def snapshot_info() -> SubvolumeInfo:
    """Metadata of a read-only snapshot."""
    return SubvolumeInfo(parent_uuid="2f1c9c0e-7a4b-4e43-9d55-8a1f5f0b1c2d", read_only=True)


@pytest.fixture
def write_mount_table(tmp_path: Path) -> Callable[[str], Path]:
    """Return a helper that writes a mount table file and returns its path."""

    def _write(content: str) -> Path:
        path = tmp_path / "mounts"
        path.write_text(content)
        return path

    return _write


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    """Clock frozen at 2024-03-01 14:15."""
    return lambda: datetime(2024, 3, 1, 14, 15, 42)


MOCK_PROC_MOUNTS = """\
proc /proc proc rw,nosuid,nodev,noexec,relatime 0 0
/dev/nvme0n1p2 / btrfs rw,noatime,compress=zstd:3,ssd,subvolid=256,subvol=/@ 0 0
/dev/nvme0n1p2 /home btrfs rw,noatime,compress=zstd:3,ssd,subvolid=257,subvol=/@home 0 0
/dev/nvme0n1p1 /boot/efi vfat rw,relatime,fmask=0077,dmask=0077 0 0
tmpfs /tmp tmpfs rw,nosuid,nodev 0 0
"""


@pytest.fixture
def mock_proc_mounts() -> str:
    """Sample /proc/mounts with two btrfs subvolume mounts."""
    return MOCK_PROC_MOUNTS


@pytest.fixture
def no_makedirs() -> Iterator[MagicMock]:
    """Keep snapshot directory creation away from the real filesystem."""
    with patch("btrfs_autosnap.operators.snapshot.os.makedirs") as mock_makedirs:
        yield mock_makedirs


@pytest.fixture
def config_file(tmp_path: Path) -> Callable[..., Path]:
    """Return a helper writing a config file whose mount table lists / and /home."""

    def _write(extra: str = "", mounts: str = MOCK_PROC_MOUNTS) -> Path:
        mount_table = tmp_path / "mounts"
        mount_table.write_text(mounts)
        path = tmp_path / "config.toml"
        path.write_text(f'mount_table = "{mount_table}"\n{extra}')
        return path

    return _write
