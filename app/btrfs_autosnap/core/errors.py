"""Exception hierarchy for snapshot runs.

Fatal errors (configuration, discovery, validation) abort a run before
any snapshot is created or deleted. Operation errors are raised by the
subvolume tool for a single create or delete and are turned into failed
results by the operators, so one bad path never stops the others.
"""


class AutoSnapshotError(Exception):
    """Base exception for all btrfs-auto-snapshot errors."""


class ConfigurationError(AutoSnapshotError):
    """Raised when the run configuration is invalid."""


class DiscoveryError(AutoSnapshotError):
    """Raised when subvolumes cannot be discovered."""


class UnreadableMountTableError(DiscoveryError):
    """Raised when the mount table cannot be read at all."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read mount table {path}: {reason}")


class SubvolumeToolError(DiscoveryError):
    """Raised when a subvolume query (list or show) fails."""


class SubvolumeVanishedError(SubvolumeToolError):
    """Raised when a queried subvolume no longer exists.

    Overlapping runs delete snapshots between one run's list and show
    queries; discovery skips such subvolumes.
    """

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Subvolume vanished: {path}: {reason}")


class PathValidationError(AutoSnapshotError):
    """Raised when requested paths cannot be snapshotted."""


class NotASubvolumeError(PathValidationError):
    """Raised when one or more requested paths are not live btrfs subvolumes.

    Attributes:
        paths: Every requested path that failed validation.
    """

    def __init__(self, paths: list[str]) -> None:
        self.paths = list(paths)
        joined = ", ".join(self.paths)
        super().__init__(f"Not a btrfs subvolume: {joined}")


class OperationError(AutoSnapshotError):
    """Raised when a single snapshot create or delete fails."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class SubvolumeNotFoundError(OperationError):
    """Raised when deleting a subvolume that no longer exists."""
