"""Snapshot run orchestration.

Wires discovery, validation, snapshot creation and retention pruning
into a single pass. These functions are shared between the CLI commands.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING

from btrfs_autosnap.core.errors import DiscoveryError
from btrfs_autosnap.core.validator import resolve_working_paths
from btrfs_autosnap.models.action import RunReport
from btrfs_autosnap.operators.retention import RetentionPruner
from btrfs_autosnap.operators.snapshot import SnapshotCreator
from btrfs_autosnap.scanners.mounts import DEFAULT_MOUNT_TABLE, MountTableReader
from btrfs_autosnap.scanners.subvolumes import SubvolumeScanner

if TYPE_CHECKING:
    from btrfs_autosnap.models.config import SnapshotConfig
    from btrfs_autosnap.models.subvolume import DiscoveredSubvolume
    from btrfs_autosnap.tools.base import SubvolumeTool

logger = logging.getLogger(__name__)


def require_tool(tool: SubvolumeTool) -> None:
    """Fail early when the subvolume tool cannot be used.

    Raises:
        DiscoveryError: If the tool is not available on this system.
    """
    if not tool.is_available():
        msg = "btrfs command is not available on this system"
        raise DiscoveryError(msg)


def discover(
    tool: SubvolumeTool,
    mount_table: str = DEFAULT_MOUNT_TABLE,
) -> list[DiscoveredSubvolume]:
    """Discover every live subvolume of the mounted btrfs filesystems.

    Args:
        tool: Subvolume tool for list and show queries.
        mount_table: Mount table file to read.

    Returns:
        Live subvolumes in discovery order.

    Raises:
        DiscoveryError: If the mount table or a subvolume cannot be read.
    """
    require_tool(tool)
    mounts = MountTableReader(mount_table).read()
    logger.debug("Found %d btrfs mount(s): %s", len(mounts), ", ".join(mounts) or "-")

    subvolumes = list(SubvolumeScanner(tool, mounts).scan())
    logger.debug("Found %d live subvolume(s)", len(subvolumes))
    return subvolumes


def run_snapshots(
    config: SnapshotConfig,
    tool: SubvolumeTool,
    *,
    mount_table: str = DEFAULT_MOUNT_TABLE,
    clock: Callable[[], datetime] = datetime.now,
) -> RunReport:
    """Run one snapshot pass: discover, validate, snapshot, prune.

    Fatal errors propagate before anything is changed. Failed creates
    and deletes are recorded in the report and do not stop the run.

    Args:
        config: Run configuration.
        tool: Subvolume tool for queries and mutations.
        mount_table: Mount table file to read.
        clock: Returns the time used in snapshot names.

    Returns:
        RunReport with every create and delete result.

    Raises:
        DiscoveryError: If subvolumes cannot be discovered.
        NotASubvolumeError: If a requested path is not a live subvolume.
    """
    subvolumes = discover(tool, mount_table)
    working_paths = resolve_working_paths(config, [sub.path for sub in subvolumes])
    tree_paths = {sub.path: sub.tree_path for sub in subvolumes}

    report = RunReport(working_paths=working_paths)
    report.results.extend(SnapshotCreator(tool, config, clock=clock).create(working_paths))
    report.results.extend(RetentionPruner(tool, config, tree_paths).prune(working_paths))

    logger.info(
        "Snapshot run finished: %d created, %d deleted, %d failed",
        len(report.created),
        len(report.deleted),
        len(report.failures),
    )
    return report
