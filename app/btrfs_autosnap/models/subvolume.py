"""Subvolume domain models.

This module defines the data structures produced while discovering
subvolumes: mount table entries, candidates awaiting classification,
metadata reported by the subvolume tool, and snapshot records.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class MountEntry:
    """A mounted btrfs subvolume.

    Attributes:
        mountpoint: Absolute, normalized path where the subvolume is attached.
        subvolume_root: Subvolume path relative to the filesystem's top level,
            without a leading slash. Empty for the top-level subvolume.
    """

    mountpoint: str
    subvolume_root: str = ""

    def __post_init__(self) -> None:
        """Validate mount entry data after initialization."""
        if not self.mountpoint.startswith("/"):
            msg = f"Mountpoint must be absolute, got {self.mountpoint!r}"
            raise ValueError(msg)
        if self.subvolume_root.startswith("/"):
            msg = f"Subvolume root must not start with '/', got {self.subvolume_root!r}"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class SubvolumeInfo:
    """Metadata reported by ``btrfs subvolume show``.

    Attributes:
        parent_uuid: UUID of the subvolume this one was snapshotted from,
            None for subvolumes created from scratch.
        read_only: Whether the subvolume carries the readonly flag.
    """

    parent_uuid: str | None
    read_only: bool

    @property
    def has_parent(self) -> bool:
        """Check if the subvolume has a parent identifier."""
        return self.parent_uuid is not None


@dataclass(frozen=True, slots=True)
class CandidateSubvolume:
    """A subvolume found below a mountpoint, before classification.

    Attributes:
        path: Absolute filesystem path of the subvolume.
        has_parent: Whether the subvolume has a parent UUID.
        read_only: Whether the subvolume is read-only.
        tree_path: Subvolume path relative to the filesystem's top level.
    """

    path: str
    has_parent: bool
    read_only: bool
    tree_path: str = ""

    @classmethod
    def from_info(
        cls, path: str, info: SubvolumeInfo, tree_path: str = ""
    ) -> "CandidateSubvolume":
        """Build a candidate from subvolume metadata."""
        return cls(
            path=path,
            has_parent=info.has_parent,
            read_only=info.read_only,
            tree_path=tree_path,
        )

    @property
    def is_live(self) -> bool:
        """Check if the candidate is a data subvolume rather than a snapshot.

        Snapshots carry a parent UUID and are normally read-only. A
        writable snapshot is still excluded by its parent UUID.
        """
        return not self.has_parent and not self.read_only


@dataclass(frozen=True, slots=True)
class SnapshotRecord:
    """A snapshot listed by the subvolume tool.

    Attributes:
        path: Subvolume path as reported by the tool (tree-relative), or
            absolute once mapped onto a snapshot directory.
        generation: Filesystem generation counter, higher is newer.
    """

    path: str
    generation: int


@dataclass(frozen=True, slots=True)
class DiscoveredSubvolume:
    """A live subvolume found during discovery.

    Attributes:
        path: Absolute filesystem path of the subvolume.
        mountpoint: Mountpoint through which it was found.
        tree_path: Subvolume path relative to the filesystem's top level,
            as ``btrfs subvolume list`` prefixes its snapshots.
    """

    path: str
    mountpoint: str
    tree_path: str = ""

    @property
    def is_mountpoint(self) -> bool:
        """Check if the subvolume is itself mounted."""
        return self.path == self.mountpoint
