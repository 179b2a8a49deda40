"""Run configuration model.

Defines the immutable configuration value that is threaded through
discovery, validation, snapshot creation and retention pruning.
"""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from btrfs_autosnap.core.errors import ConfigurationError

# Wildcard path requesting every live subvolume
ALL_SUBVOLUMES = "//"

DEFAULT_PREFIX = "btrfs-auto-snap"
DEFAULT_SNAPSHOT_DIR_NAME = ".btrfs"

# Characters allowed in prefixes and labels; they end up in directory names
# and in the retention pattern.
NAME_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9_.:+-]*$"


class SnapshotConfig(BaseModel):
    """Configuration for a single snapshot run.

    Attributes:
        prefix: Snapshot name prefix.
        label: Rotation label, usually "frequent", "hourly", "daily" or "monthly".
        keep: Number of newest snapshots to keep per path. None disables pruning.
        writable: Create writable snapshots instead of read-only ones.
        dry_run: Log what would be done without changing anything.
        snapshot_dir_name: Name of the directory holding snapshots in each subvolume.
        requested_paths: Either ("//",) for all subvolumes or explicit paths.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    prefix: Annotated[
        str,
        Field(pattern=NAME_PATTERN, description="Snapshot name prefix"),
    ] = DEFAULT_PREFIX
    label: Annotated[
        str,
        Field(pattern=NAME_PATTERN, description="Rotation label"),
    ]
    keep: Annotated[
        int | None,
        Field(ge=1, description="Snapshots to keep per path (None = never prune)"),
    ] = None
    writable: Annotated[bool, Field(description="Create writable snapshots")] = False
    dry_run: Annotated[bool, Field(description="Do not change anything")] = False
    snapshot_dir_name: Annotated[
        str,
        Field(min_length=1, description="Snapshot directory name inside each subvolume"),
    ] = DEFAULT_SNAPSHOT_DIR_NAME
    requested_paths: Annotated[
        tuple[str, ...],
        Field(min_length=1, description="Subvolume paths, or '//' for all"),
    ] = (ALL_SUBVOLUMES,)

    @field_validator("snapshot_dir_name")
    @classmethod
    def validate_snapshot_dir_name(cls, v: str) -> str:
        """Reject names that would escape the subvolume."""
        if "/" in v or v in (".", ".."):
            msg = f"snapshot directory name must be a plain name, got {v!r}"
            raise ValueError(msg)
        return v

    @field_validator("requested_paths")
    @classmethod
    def validate_requested_paths(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Require absolute paths and forbid mixing '//' with explicit paths."""
        if ALL_SUBVOLUMES in v and len(v) > 1:
            msg = f"'{ALL_SUBVOLUMES}' cannot be combined with other paths"
            raise ValueError(msg)
        for path in v:
            if not path.startswith("/"):
                msg = f"path must be absolute, got {path!r}"
                raise ValueError(msg)
        return v

    @property
    def all_subvolumes(self) -> bool:
        """Check if every live subvolume was requested."""
        return self.requested_paths == (ALL_SUBVOLUMES,)

    @property
    def prune_enabled(self) -> bool:
        """Check if a retention count was configured."""
        return self.keep is not None


def create_snapshot_config(**values: object) -> SnapshotConfig:
    """Build a SnapshotConfig, reporting invalid values as ConfigurationError.

    Args:
        **values: Field values for SnapshotConfig.

    Returns:
        Validated, frozen SnapshotConfig.

    Raises:
        ConfigurationError: If any value is invalid.
    """
    try:
        return SnapshotConfig.model_validate(values)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc']) or 'config'}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigurationError(f"Invalid configuration: {problems}") from e
