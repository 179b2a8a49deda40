"""Snapshot creation operator.

Creates one snapshot per working path in the subvolume's snapshot
directory, replacing a snapshot of the same name left by an earlier run
within the same minute.
"""

import logging
import os
from collections.abc import Callable, Sequence
from datetime import datetime

from btrfs_autosnap.core.errors import OperationError
from btrfs_autosnap.core.naming import snapshot_dir, snapshot_name, snapshot_path
from btrfs_autosnap.models.action import SnapshotActionResult, SnapshotActionType
from btrfs_autosnap.models.config import SnapshotConfig
from btrfs_autosnap.tools.base import SubvolumeTool

logger = logging.getLogger(__name__)


class SnapshotCreator:
    """Creates snapshots of working paths.

    Failures are isolated per path: a path whose snapshot cannot be
    created yields a failed result and the next path is processed.

    Attributes:
        dry_run: If True, only log what would be created.
    """

    def __init__(
        self,
        tool: SubvolumeTool,
        config: SnapshotConfig,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Initialize the creator.

        Args:
            tool: Subvolume tool performing the snapshot.
            config: Run configuration (prefix, label, write mode, dry-run).
            clock: Returns the time used in snapshot names.
        """
        self._tool = tool
        self._config = config
        self._clock = clock

    @property
    def dry_run(self) -> bool:
        """Check if creator is in dry-run mode."""
        return self._config.dry_run

    def create(self, paths: Sequence[str]) -> list[SnapshotActionResult]:
        """Create a snapshot of every path.

        All snapshots of one call share a single timestamp.

        Args:
            paths: Validated working paths.

        Returns:
            One SnapshotActionResult per path.
        """
        name = snapshot_name(self._config.prefix, self._config.label, self._clock())
        return [self._create_single(path, name) for path in paths]

    def _create_single(self, path: str, name: str) -> SnapshotActionResult:
        """Create a single snapshot.

        Args:
            path: Working path to snapshot.
            name: Snapshot name.

        Returns:
            SnapshotActionResult for this path.
        """
        directory = snapshot_dir(path, self._config.snapshot_dir_name)
        target = snapshot_path(path, self._config.snapshot_dir_name, name)

        if self.dry_run:
            logger.info("Dry-run: would snapshot %s to %s", path, target)
            return SnapshotActionResult(
                action_type=SnapshotActionType.CREATE,
                path=target,
                source=path,
                success=True,
                dry_run=True,
            )

        try:
            os.makedirs(directory, exist_ok=True)
        except OSError as e:
            logger.error("Cannot create snapshot directory %s: %s", directory, e)
            return self._failed(target, path, f"Cannot create {directory}: {e}")

        self._remove_same_name(target)

        try:
            self._tool.create_snapshot(path, target, writable=self._config.writable)
        except OperationError as e:
            logger.error("Failed to snapshot %s: %s", path, e.reason)
            return self._failed(target, path, e.reason)

        logger.info("Created snapshot %s", target)
        return SnapshotActionResult(
            action_type=SnapshotActionType.CREATE,
            path=target,
            source=path,
            success=True,
        )

    def _remove_same_name(self, target: str) -> None:
        """Delete a snapshot already at ``target``, if there is one.

        Two runs within the same minute (or a clock set back) compute the
        same name; the newer run wins. There is usually nothing to delete,
        so failures are only debug-logged.
        """
        try:
            self._tool.delete_subvolume(target)
        except OperationError as e:
            logger.debug("Nothing replaced at %s: %s", target, e.reason)
        else:
            logger.info("Replaced existing snapshot %s", target)

    @staticmethod
    def _failed(target: str, source: str, error: str) -> SnapshotActionResult:
        return SnapshotActionResult(
            action_type=SnapshotActionType.CREATE,
            path=target,
            source=source,
            success=False,
            error=error,
        )
