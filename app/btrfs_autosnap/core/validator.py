"""Working path validation.

Resolves the paths a run operates on and checks them against the
discovered live subvolumes before anything is changed.
"""

import logging
from collections.abc import Sequence

from btrfs_autosnap.core.errors import NotASubvolumeError
from btrfs_autosnap.models.config import ALL_SUBVOLUMES, SnapshotConfig

logger = logging.getLogger(__name__)


def validate_paths(requested: Sequence[str], live: Sequence[str]) -> list[str]:
    """Check that every requested path is a live subvolume.

    Paths are compared verbatim. All invalid paths are collected before
    failing so a single run reports every problem.

    Args:
        requested: Paths asked for by the caller.
        live: Live subvolume paths from discovery.

    Returns:
        The requested paths in order, without duplicates.

    Raises:
        NotASubvolumeError: If any requested path is not a live subvolume.
    """
    live_set = set(live)
    invalid = [path for path in requested if path not in live_set]
    if invalid:
        raise NotASubvolumeError(invalid)
    return list(dict.fromkeys(requested))


def resolve_working_paths(config: SnapshotConfig, live: Sequence[str]) -> list[str]:
    """Return the validated paths a run operates on.

    Args:
        config: Run configuration.
        live: Live subvolume paths from discovery.

    Returns:
        Every live subvolume for a ``//`` request, otherwise the
        validated requested paths.

    Raises:
        NotASubvolumeError: If a requested path is not a live subvolume,
            or ``//`` was requested and no subvolume was found.
    """
    if config.all_subvolumes:
        if not live:
            raise NotASubvolumeError([ALL_SUBVOLUMES])
        logger.debug("Working on all %d live subvolumes", len(live))
        return list(live)

    return validate_paths(config.requested_paths, live)
