"""Action models for snapshot operations.

This module defines data structures for representing snapshot
operations (create, delete) and their execution results.
"""

from dataclasses import dataclass, field
from enum import Enum


class SnapshotActionType(Enum):
    """Type of snapshot operation.

    Attributes:
        CREATE: Create a new snapshot of a working path.
        DELETE: Delete a snapshot that fell out of the retention window.
    """

    CREATE = "create"
    DELETE = "delete"


@dataclass(frozen=True, slots=True)
class SnapshotActionResult:
    """Result of a single snapshot create or delete.

    Attributes:
        action_type: The operation that was attempted.
        path: Snapshot path that was created or deleted.
        source: Working path the snapshot belongs to.
        success: Whether the operation completed successfully.
        error: Error message if the operation failed, None otherwise.
        dry_run: Whether this was a dry-run (nothing was changed).
        skipped: Whether there was nothing to do (snapshot already gone).
    """

    action_type: SnapshotActionType
    path: str
    source: str
    success: bool
    error: str | None = None
    dry_run: bool = False
    skipped: bool = False

    @property
    def failed(self) -> bool:
        """Check if the operation failed."""
        return not self.success

    @property
    def outcome(self) -> str:
        """Short outcome label: created, deleted, skipped, dry-run or failed."""
        if self.failed:
            return "failed"
        if self.dry_run:
            return "dry-run"
        if self.skipped:
            return "skipped"
        return "created" if self.action_type == SnapshotActionType.CREATE else "deleted"


@dataclass(slots=True)
class RunReport:
    """Aggregated outcome of a snapshot run.

    Attributes:
        working_paths: Subvolumes that were processed.
        results: Every create and delete result, in execution order.
    """

    working_paths: list[str] = field(default_factory=list)
    results: list[SnapshotActionResult] = field(default_factory=list)

    @property
    def created(self) -> list[SnapshotActionResult]:
        """Successful create results."""
        return [
            r for r in self.results if r.success and r.action_type == SnapshotActionType.CREATE
        ]

    @property
    def deleted(self) -> list[SnapshotActionResult]:
        """Successful delete results, including skipped ones."""
        return [
            r for r in self.results if r.success and r.action_type == SnapshotActionType.DELETE
        ]

    @property
    def failures(self) -> list[SnapshotActionResult]:
        """Failed results."""
        return [r for r in self.results if r.failed]

    @property
    def success(self) -> bool:
        """Check if every operation of the run succeeded."""
        return not self.failures

    @property
    def exit_code(self) -> int:
        """Process exit status: 0 when nothing failed, 1 otherwise."""
        return 0 if self.success else 1
