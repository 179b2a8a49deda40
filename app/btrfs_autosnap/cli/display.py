"""Shared Rich display functions for snapshot results.

Provides reusable table builders and summary printers for the
snapshot, subvolumes and snapshots commands.
"""

from rich.markup import escape
from rich.table import Table

from btrfs_autosnap.models.action import RunReport, SnapshotActionResult
from btrfs_autosnap.models.subvolume import DiscoveredSubvolume, SnapshotRecord
from btrfs_autosnap.utils.formatting import console, print_success

_OUTCOME_STYLES: dict[str, str] = {
    "created": "created",
    "deleted": "deleted",
    "skipped": "muted",
    "dry-run": "info",
    "failed": "error",
}


def create_results_table(results: list[SnapshotActionResult], dry_run: bool = False) -> Table:
    """Create a Rich table displaying snapshot results.

    Args:
        results: Create and delete results of a run.
        dry_run: Whether this is a dry-run (changes table title).

    Returns:
        Rich Table configured for results display.
    """
    title = "Snapshot Results (Dry Run)" if dry_run else "Snapshot Results"

    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Status", width=8, justify="center")
    table.add_column("Action", width=8)
    table.add_column("Snapshot", no_wrap=True)
    table.add_column("Message")

    for result in results:
        outcome = result.outcome
        style = _OUTCOME_STYLES[outcome]
        if result.failed:
            message = result.error or "Unknown error"
        elif result.skipped:
            message = "Already gone"
        else:
            message = ""

        table.add_row(
            f"[{style}]{outcome}[/{style}]",
            result.action_type.value,
            f"[path]{escape(result.path)}[/path]",
            f"[muted]{escape(message)}[/muted]",
        )

    return table


def print_results_summary(report: RunReport) -> None:
    """Print a summary of a snapshot run.

    Shows a success message when everything succeeded, or a count of
    succeeded/failed operations when there are failures.

    Args:
        report: The run report.
    """
    created = len(report.created)
    deleted = len(report.deleted)
    failed = len(report.failures)

    if failed == 0:
        print_success(
            f"{len(report.working_paths)} subvolume(s): "
            f"{created} snapshot(s) created, {deleted} deleted."
        )
    else:
        console.print(
            f"\n[success]{created} created[/success], [deleted]{deleted} deleted[/deleted], "
            f"[error]{failed} failed[/error]"
        )


def create_subvolumes_table(subvolumes: list[DiscoveredSubvolume]) -> Table:
    """Create a Rich table listing live subvolumes.

    Args:
        subvolumes: Discovered live subvolumes.

    Returns:
        Rich Table with Subvolume and Mountpoint columns.
    """
    table = Table(
        title="Live Subvolumes",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Subvolume", no_wrap=True)
    table.add_column("Found via")

    for sub in subvolumes:
        via = "mountpoint" if sub.is_mountpoint else sub.mountpoint
        table.add_row(f"[path]{escape(sub.path)}[/path]", f"[muted]{escape(via)}[/muted]")

    return table


def create_snapshots_table(
    path: str,
    kept: list[SnapshotRecord],
    expired: list[SnapshotRecord],
) -> Table:
    """Create a Rich table of one path's rotation snapshots.

    Args:
        path: Working path the snapshots belong to.
        kept: Snapshots a pruning pass would keep, newest first.
        expired: Snapshots a pruning pass would delete, newest first.

    Returns:
        Rich Table with Snapshot, Generation and Status columns.
    """
    table = Table(
        title=f"Snapshots of {escape(path)}",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Snapshot", no_wrap=True)
    table.add_column("Generation", justify="right")
    table.add_column("Status", width=8)

    for record in kept:
        table.add_row(escape(record.path), str(record.generation), "[kept]keep[/kept]")
    for record in expired:
        table.add_row(escape(record.path), str(record.generation), "[deleted]expire[/deleted]")

    return table
