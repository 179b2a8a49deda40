"""Snapshot command implementation.

Takes a snapshot of the requested subvolumes and prunes the snapshots
of the same rotation that fall outside the retention count.
"""

from typing import Annotated

import typer

from btrfs_autosnap.cli.common import create_tool, get_settings, handle_errors, is_quiet
from btrfs_autosnap.cli.display import create_results_table, print_results_summary
from btrfs_autosnap.core.runner import run_snapshots
from btrfs_autosnap.models.config import create_snapshot_config
from btrfs_autosnap.utils.formatting import console, print_warning


def snapshot(
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
        typer.Option(
            "--label",
            "-l",
            help="Rotation label, usually 'frequent', 'hourly', 'daily' or 'monthly'.",
        ),
    ],
    prefix: Annotated[
        str | None,
        typer.Option(
            "--prefix",
            "-p",
            help="Snapshot name prefix (default: btrfs-auto-snap).",
        ),
    ] = None,
    keep: Annotated[
        int | None,
        typer.Option(
            "--keep",
            "-k",
            help="Keep NUM recent snapshots of this label and delete older ones.",
            metavar="NUM",
        ),
    ] = None,
    writeable: Annotated[
        bool,
        typer.Option(
            "--writeable",
            "-w",
            help="Create writeable snapshots instead of read-only ones.",
        ),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            "-n",
            help="Print actions without actually doing anything.",
        ),
    ] = False,
    snapshot_dir: Annotated[
        str | None,
        typer.Option(
            "--snapshot-dir",
            help="Snapshot directory name inside each subvolume (default: .btrfs).",
        ),
    ] = None,
) -> None:
    """Snapshot subvolumes and prune old snapshots.

    Examples:
        btrfs-auto-snapshot snapshot -l hourly -k 24 //
        btrfs-auto-snapshot snapshot -l daily -k 31 /home /srv
    """
    settings = get_settings(ctx)
    dir_name = snapshot_dir if snapshot_dir is not None else settings.snapshot_dir_name

    with handle_errors():
        config = create_snapshot_config(
            prefix=prefix if prefix is not None else settings.prefix,
            label=label,
            keep=keep if keep is not None else settings.keep,
            writable=writeable or settings.writable,
            dry_run=dry_run,
            snapshot_dir_name=dir_name,
            requested_paths=tuple(paths),
        )
        report = run_snapshots(config, create_tool(settings), mount_table=settings.mount_table)

    if not is_quiet(ctx):
        if report.results:
            console.print(create_results_table(report.results, dry_run=config.dry_run))
        print_results_summary(report)

    if not report.success:
        print_warning(f"{len(report.failures)} snapshot operation(s) failed.")
        raise typer.Exit(code=report.exit_code)
