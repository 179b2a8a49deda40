"""Abstract base class for subvolume tools.

This module defines the SubvolumeTool interface through which discovery
and retention query and mutate the filesystem.
"""

from abc import ABC, abstractmethod

from btrfs_autosnap.models.subvolume import SnapshotRecord, SubvolumeInfo


class SubvolumeTool(ABC):
    """Abstract base class for all subvolume tools.

    Queries raise SubvolumeToolError on failure. Mutations raise
    OperationError, or SubvolumeNotFoundError when deleting a path that
    does not exist.

    Example:
        >>> tool = BtrfsTool()
        >>> if tool.is_available():
        ...     for rel in tool.list_subvolumes("/"):
        ...         print(rel)
    """

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the underlying tool can be used on this system.

        Returns:
            True if the tool can be used, False otherwise.
        """

    @abstractmethod
    def list_subvolumes(self, path: str) -> list[str]:
        """List subvolumes nested below a mounted subvolume.

        Args:
            path: Absolute path of a mounted subvolume.

        Returns:
            Subvolume paths relative to the filesystem's top level, in the
            order the tool reports them. May contain blank entries.

        Raises:
            SubvolumeToolError: If the query fails.
        """

    @abstractmethod
    def show_subvolume(self, path: str) -> SubvolumeInfo:
        """Return parent and read-only metadata for a subvolume.

        Args:
            path: Absolute path of the subvolume.

        Raises:
            SubvolumeToolError: If the query fails.
        """

    @abstractmethod
    def list_snapshots(self, path: str) -> list[SnapshotRecord]:
        """List snapshots below a subvolume, newest generation first.

        Args:
            path: Absolute path of the subvolume.

        Returns:
            Records with tree-relative paths, sorted by generation descending.

        Raises:
            SubvolumeToolError: If the query fails.
        """

    @abstractmethod
    def create_snapshot(self, source: str, destination: str, writable: bool = False) -> None:
        """Create a snapshot of ``source`` at ``destination``.

        Args:
            source: Absolute path of the subvolume to snapshot.
            destination: Absolute path of the new snapshot.
            writable: Create a writable snapshot instead of a read-only one.

        Raises:
            OperationError: If the snapshot could not be created.
        """

    @abstractmethod
    def delete_subvolume(self, path: str) -> None:
        """Delete a subvolume or snapshot.

        Args:
            path: Absolute path of the subvolume to delete.

        Raises:
            SubvolumeNotFoundError: If nothing exists at ``path``.
            OperationError: If the deletion failed for any other reason.
        """
