"""Retention pruning operator.

Deletes all but the newest ``keep`` snapshots of the current rotation in
each working path's snapshot directory. Recency is the filesystem
generation counter, so clock changes cannot reorder snapshots.
"""

import logging
import posixpath
from collections.abc import Mapping, Sequence

from btrfs_autosnap.core.errors import OperationError, SubvolumeNotFoundError, SubvolumeToolError
from btrfs_autosnap.core.naming import snapshot_dir, snapshot_name_pattern
from btrfs_autosnap.models.action import SnapshotActionResult, SnapshotActionType
from btrfs_autosnap.models.config import SnapshotConfig
from btrfs_autosnap.models.subvolume import SnapshotRecord
from btrfs_autosnap.tools.base import SubvolumeTool

logger = logging.getLogger(__name__)


class RetentionPruner:
    """Prunes old snapshots of one rotation (prefix and label).

    Snapshots of other labels or prefixes in the same directory, and
    snapshots elsewhere in the subvolume, are never touched.

    Attributes:
        dry_run: If True, only log what would be deleted.
    """

    def __init__(
        self,
        tool: SubvolumeTool,
        config: SnapshotConfig,
        tree_paths: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize the pruner.

        Args:
            tool: Subvolume tool used to list and delete snapshots.
            config: Run configuration (prefix, label, keep, dry-run).
            tree_paths: Mapping of working path to its path relative to the
                filesystem's top level, from discovery.
        """
        self._tool = tool
        self._config = config
        self._tree_paths = dict(tree_paths or {})
        self._pattern = snapshot_name_pattern(config.prefix, config.label)

    @property
    def dry_run(self) -> bool:
        """Check if pruner is in dry-run mode."""
        return self._config.dry_run

    def prune(self, paths: Sequence[str]) -> list[SnapshotActionResult]:
        """Prune the snapshots of every path.

        Does nothing when no retention count is configured.

        Args:
            paths: Validated working paths.

        Returns:
            One SnapshotActionResult per deleted (or failed) snapshot, plus a
            failed result for each path whose snapshots could not be listed.
        """
        keep = self._config.keep
        if keep is None:
            logger.debug("No retention count configured, skipping pruning")
            return []

        results: list[SnapshotActionResult] = []
        for path in paths:
            try:
                _, expired = self.plan(path, keep)
            except SubvolumeToolError as e:
                logger.error("Cannot list snapshots of %s: %s", path, e)
                results.append(
                    SnapshotActionResult(
                        action_type=SnapshotActionType.DELETE,
                        path=snapshot_dir(path, self._config.snapshot_dir_name),
                        source=path,
                        success=False,
                        error=str(e),
                    )
                )
                continue

            for record in expired:
                results.append(self._delete_single(path, record.path))
        return results

    def plan(
        self, path: str, keep: int | None
    ) -> tuple[list[SnapshotRecord], list[SnapshotRecord]]:
        """Split a path's rotation snapshots into kept and expired ones.

        Args:
            path: Working path.
            keep: Number of newest snapshots to keep, None to keep all.

        Returns:
            Tuple of (kept, expired), each newest first.

        Raises:
            SubvolumeToolError: If the snapshots cannot be listed.
        """
        snapshots = self.matching_snapshots(path)
        if keep is None:
            return snapshots, []
        return snapshots[:keep], snapshots[keep:]

    def matching_snapshots(self, path: str) -> list[SnapshotRecord]:
        """List this rotation's snapshots of a path, newest first.

        Args:
            path: Working path.

        Returns:
            SnapshotRecords with absolute paths in the snapshot directory.

        Raises:
            SubvolumeToolError: If the snapshots cannot be listed.
        """
        directory = snapshot_dir(path, self._config.snapshot_dir_name)
        tree_path = self._tree_paths.get(path, "")
        records = sorted(self._tool.list_snapshots(path), key=lambda r: r.generation, reverse=True)

        matching: list[SnapshotRecord] = []
        for record in records:
            absolute = map_to_snapshot_dir(
                record.path, path, self._config.snapshot_dir_name, tree_path
            )
            if absolute is None:
                continue
            parent, name = posixpath.split(absolute)
            if parent != directory or not self._pattern.match(name):
                continue
            matching.append(SnapshotRecord(path=absolute, generation=record.generation))
        return matching

    def _delete_single(self, source: str, target: str) -> SnapshotActionResult:
        """Delete a single expired snapshot.

        Args:
            source: Working path the snapshot belongs to.
            target: Absolute snapshot path.

        Returns:
            SnapshotActionResult for this snapshot.
        """
        if self.dry_run:
            logger.info("Dry-run: would delete snapshot %s", target)
            return SnapshotActionResult(
                action_type=SnapshotActionType.DELETE,
                path=target,
                source=source,
                success=True,
                dry_run=True,
            )

        try:
            self._tool.delete_subvolume(target)
        except SubvolumeNotFoundError:
            logger.info("Snapshot already gone: %s", target)
            return SnapshotActionResult(
                action_type=SnapshotActionType.DELETE,
                path=target,
                source=source,
                success=True,
                skipped=True,
            )
        except OperationError as e:
            logger.error("Failed to delete snapshot %s: %s", target, e.reason)
            return SnapshotActionResult(
                action_type=SnapshotActionType.DELETE,
                path=target,
                source=source,
                success=False,
                error=e.reason,
            )

        logger.info("Deleted snapshot %s", target)
        return SnapshotActionResult(
            action_type=SnapshotActionType.DELETE,
            path=target,
            source=source,
            success=True,
        )


def map_to_snapshot_dir(rel: str, path: str, dir_name: str, tree_path: str = "") -> str | None:
    """Re-root a listed snapshot path at a working path's snapshot directory.

    btrfs lists snapshots relative to the filesystem's top level (for
    example ``@home/.btrfs/name`` for ``/home``). Only snapshots directly
    inside the working path's own snapshot directory are mapped: the part
    before the last ``<dir_name>/`` component must be ``tree_path`` or
    empty. Snapshot directories of nested subvolumes, such as
    ``@/srv/.btrfs`` seen from ``/``, give None.

    Args:
        rel: Snapshot path as listed by the subvolume tool.
        path: Working path the snapshots were listed for.
        dir_name: Snapshot directory name.
        tree_path: Working path relative to the filesystem's top level.

    Returns:
        Absolute snapshot path, or None if ``rel`` is not inside the
        working path's snapshot directory.
    """
    head, sep, tail = ("/" + rel.strip().strip("/")).rpartition(f"/{dir_name}/")
    if not sep or not tail:
        return None
    if head.strip("/") not in ("", tree_path.strip("/")):
        logger.debug("Snapshot %s belongs to another subvolume than %s", rel, path)
        return None
    return f"{snapshot_dir(path, dir_name)}/{tail}"
