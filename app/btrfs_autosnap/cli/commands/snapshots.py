"""Snapshots command implementation.

Lists one rotation's snapshots per subvolume, newest first, and shows
which of them a pruning pass with a given keep count would delete.
"""

from typing import Annotated

import typer
from rich.markup import escape

from btrfs_autosnap.cli.common import create_tool, get_settings, handle_errors
from btrfs_autosnap.cli.display import create_snapshots_table
from btrfs_autosnap.core.runner import discover
from btrfs_autosnap.core.validator import resolve_working_paths
from btrfs_autosnap.models.config import create_snapshot_config
from btrfs_autosnap.operators.retention import RetentionPruner
from btrfs_autosnap.utils.formatting import console, print_info


def snapshots(
    ctx: typer.Context,
    paths: Annotated[
        list[str],
        typer.Argument(
            help="Subvolume paths, or '//' for all subvolumes.",
            show_default=False,
        ),
    ],
    label: Annotated[
        str,
        typer.Option("--label", "-l", help="Rotation label to list."),
    ],
    prefix: Annotated[
        str | None,
        typer.Option("--prefix", "-p", help="Snapshot name prefix."),
    ] = None,
    keep: Annotated[
        int | None,
        typer.Option(
            "--keep",
            "-k",
            help="Mark snapshots beyond the NUM newest as expired.",
            metavar="NUM",
        ),
    ] = None,
) -> None:
    """List a rotation's snapshots, newest first."""
    settings = get_settings(ctx)

    with handle_errors():
        config = create_snapshot_config(
            prefix=prefix if prefix is not None else settings.prefix,
            label=label,
            keep=keep if keep is not None else settings.keep,
            snapshot_dir_name=settings.snapshot_dir_name,
            requested_paths=tuple(paths),
        )
        tool = create_tool(settings)
        subvolumes = discover(tool, settings.mount_table)
        working_paths = resolve_working_paths(config, [sub.path for sub in subvolumes])

        pruner = RetentionPruner(tool, config, {sub.path: sub.tree_path for sub in subvolumes})
        plans = [(path, *pruner.plan(path, config.keep)) for path in working_paths]

    for path, kept, expired in plans:
        if not kept and not expired:
            print_info(f"No {config.prefix}_{config.label} snapshots of {escape(path)}.")
            continue
        console.print(create_snapshots_table(path, kept, expired))
