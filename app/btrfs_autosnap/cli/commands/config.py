"""Config commands.

Shows the effective settings and writes a default configuration file.
"""

from typing import Annotated

import tomli_w
import typer
from rich.markup import escape

from btrfs_autosnap.cli.common import get_config_file, get_settings, handle_errors
from btrfs_autosnap.core.settings import Settings, save_settings, settings_to_dict
from btrfs_autosnap.utils.formatting import console, print_error, print_success

app = typer.Typer(
    help="Show or create the configuration file.",
    no_args_is_help=True,
)


@app.command()
def show(ctx: typer.Context) -> None:
    """Print the effective settings as TOML."""
    settings = get_settings(ctx)
    console.print(f"[muted]# {escape(str(get_config_file(ctx)))}[/muted]")
    console.print(tomli_w.dumps(settings_to_dict(settings)), markup=False, highlight=False)


@app.command()
def init(
    ctx: typer.Context,
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite an existing configuration file."),
    ] = False,
) -> None:
    """Write a configuration file with default settings."""
    path = get_config_file(ctx)
    if path.exists() and not force:
        print_error(
            f"Configuration file already exists: {escape(str(path))} (use --force to overwrite)"
        )
        raise typer.Exit(code=1)

    with handle_errors():
        written = save_settings(Settings(), path)
    print_success(f"Wrote default configuration to {escape(str(written))}")
