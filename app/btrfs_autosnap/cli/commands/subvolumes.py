"""Subvolumes command implementation.

Lists the live subvolumes that a '//' snapshot run would cover.
"""

import json
from enum import Enum
from typing import Annotated

import typer

from btrfs_autosnap.cli.common import create_tool, get_settings, handle_errors
from btrfs_autosnap.cli.display import create_subvolumes_table
from btrfs_autosnap.core.runner import discover
from btrfs_autosnap.utils.formatting import console, print_info


class OutputFormat(str, Enum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"


def subvolumes(
    ctx: typer.Context,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
) -> None:
    """List live btrfs subvolumes (mountpoints and nested data subvolumes)."""
    settings = get_settings(ctx)

    with handle_errors():
        found = discover(create_tool(settings), settings.mount_table)

    if output_format == OutputFormat.JSON:
        data = [{"path": sub.path, "mountpoint": sub.mountpoint} for sub in found]
        console.print_json(json.dumps(data))
        return

    if not found:
        print_info("No btrfs subvolumes found.")
        return

    console.print(create_subvolumes_table(found))
