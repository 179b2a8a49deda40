"""Subvolume enumerator.

Discovers live btrfs subvolumes: every mountpoint, plus every subvolume
nested below a mountpoint that is neither a snapshot nor itself mounted.
"""

import logging
from collections.abc import Iterator, Mapping

from btrfs_autosnap.core.errors import SubvolumeVanishedError
from btrfs_autosnap.core.naming import collapse_slashes
from btrfs_autosnap.models.subvolume import CandidateSubvolume, DiscoveredSubvolume
from btrfs_autosnap.tools.base import SubvolumeTool

logger = logging.getLogger(__name__)


class SubvolumeScanner:
    """Scanner for live subvolumes below the mounted btrfs subvolumes.

    btrfs reports nested subvolumes relative to the filesystem's top
    level, while the mount table knows where each mounted subvolume is
    attached. The scanner maps one onto the other and classifies each
    candidate with the subvolume tool.

    Example:
        >>> mounts = MountTableReader().read()
        >>> scanner = SubvolumeScanner(BtrfsTool(), mounts)
        >>> scanner.live_subvolumes()
        ('/', '/home', '/var/lib/machines')
    """

    def __init__(self, tool: SubvolumeTool, mounts: Mapping[str, str]) -> None:
        """Initialize the scanner.

        Args:
            tool: Subvolume tool used for list and show queries.
            mounts: Mapping of mountpoint to subvolume root from the mount table.
        """
        self._tool = tool
        self._mounts = dict(mounts)

    def scan(self) -> Iterator[DiscoveredSubvolume]:
        """Yield every live subvolume once, mountpoints first per mount.

        Yields:
            DiscoveredSubvolume for each live subvolume.

        Raises:
            SubvolumeToolError: If a list or show query fails.
        """
        seen: set[str] = set()

        for mountpoint, root in self._mounts.items():
            if mountpoint not in seen:
                seen.add(mountpoint)
                yield DiscoveredSubvolume(path=mountpoint, mountpoint=mountpoint, tree_path=root)

            for candidate in self.candidates(mountpoint, root):
                if candidate.path in seen:
                    continue
                if not candidate.is_live:
                    logger.debug(
                        "Not a live subvolume: %s (parent=%s, readonly=%s)",
                        candidate.path,
                        candidate.has_parent,
                        candidate.read_only,
                    )
                    continue
                seen.add(candidate.path)
                yield DiscoveredSubvolume(
                    path=candidate.path, mountpoint=mountpoint, tree_path=candidate.tree_path
                )

    def live_subvolumes(self) -> tuple[str, ...]:
        """Return the ordered set of live subvolume paths.

        Raises:
            SubvolumeToolError: If a list or show query fails.
        """
        return tuple(sub.path for sub in self.scan())

    def candidates(self, mountpoint: str, root: str) -> Iterator[CandidateSubvolume]:
        """Yield unclassified subvolumes nested below one mountpoint.

        Blank lines, paths outside the mounted subvolume and paths that
        are mountpoints themselves are skipped. So are subvolumes deleted
        between the list and show queries.

        Args:
            mountpoint: Where the subvolume is mounted.
            root: Mounted subvolume path relative to the top level.

        Raises:
            SubvolumeToolError: If a list or show query fails.
        """
        for rel in self._tool.list_subvolumes(mountpoint):
            path = resolve_subvolume_path(mountpoint, root, rel)
            if path is None:
                continue

            # Mounted subvolumes are handled as their own mountpoint
            if path in self._mounts:
                continue

            try:
                info = self._tool.show_subvolume(path)
            except SubvolumeVanishedError as e:
                logger.debug("Subvolume vanished during discovery: %s (%s)", path, e.reason)
                continue
            yield CandidateSubvolume.from_info(path, info, tree_path=rel.strip().strip("/"))


def resolve_subvolume_path(mountpoint: str, root: str, rel: str) -> str | None:
    """Map a top-level-relative subvolume path to an absolute path.

    The mounted subvolume root is replaced by its mountpoint, e.g. with
    ``@`` mounted on ``/``, ``@/var/lib/machines`` becomes
    ``/var/lib/machines``.

    Args:
        mountpoint: Where ``root`` is mounted.
        root: Mounted subvolume path relative to the top level ("" for top level).
        rel: Subvolume path relative to the top level, as listed by btrfs.

    Returns:
        Absolute path, or None for blank input and for subvolumes that are
        not reachable through this mountpoint.
    """
    rel = rel.strip().strip("/")
    if not rel:
        return None

    if root:
        if rel == root:
            return mountpoint
        if not rel.startswith(root + "/"):
            logger.debug("Subvolume %s is outside %s mounted on %s", rel, root, mountpoint)
            return None
        rel = rel[len(root) + 1 :]

    return collapse_slashes(f"{mountpoint}/{rel}")
