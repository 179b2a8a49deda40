"""Main CLI application entry point.

Defines the Typer application and global options.
"""

from pathlib import Path
from typing import Annotated

import typer

from btrfs_autosnap import __version__
from btrfs_autosnap.cli.commands import config, snapshot, snapshots, subvolumes
from btrfs_autosnap.cli.common import EXIT_INVALID
from btrfs_autosnap.core.logs import configure_logging
from btrfs_autosnap.core.paths import get_config_path
from btrfs_autosnap.core.settings import Settings, SettingsError, load_settings
from btrfs_autosnap.core.theme import reload_theme
from btrfs_autosnap.utils.formatting import apply_theme, print_error, print_warning

# Create main Typer app
app = typer.Typer(
    name="btrfs-auto-snapshot",
    help="Automatic btrfs snapshots with label-based retention.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"btrfs-auto-snapshot version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Print info messages.",
        ),
    ] = False,
    debug: Annotated[
        bool,
        typer.Option(
            "--debug",
            "-d",
            help="Print debugging messages.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress warnings and notices at the console.",
        ),
    ] = False,
    syslog: Annotated[
        bool,
        typer.Option(
            "--syslog",
            "-g",
            help="Write messages into the system log.",
        ),
    ] = False,
    config_file: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Configuration file (default: /etc/btrfs-auto-snapshot/config.toml).",
            envvar="BTRFS_AUTO_SNAPSHOT_CONFIG",
        ),
    ] = None,
) -> None:
    """btrfs-auto-snapshot - periodic btrfs snapshots with retention.

    Snapshots are stored in a .btrfs directory inside each subvolume and
    named <prefix>_<label>_<YYYY-MM-DD-HHMM>. Run one 'snapshot' command per
    label from cron or a systemd timer.
    """
    config_path = config_file or get_config_path()
    try:
        settings = load_settings(config_path)
    except SettingsError as e:
        # The config commands must stay usable to repair a broken file
        if ctx.invoked_subcommand != "config":
            print_error(str(e))
            raise typer.Exit(code=EXIT_INVALID) from e
        print_warning(str(e))
        settings = Settings()

    apply_theme(reload_theme(settings.colors))
    configure_logging(verbose=verbose, debug=debug, quiet=quiet, syslog=syslog or settings.syslog)

    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["settings"] = settings
    ctx.obj["config_path"] = config_path


# Register commands
app.command(name="snapshot")(snapshot.snapshot)
app.command(name="subvolumes")(subvolumes.subvolumes)
app.command(name="snapshots")(snapshots.snapshots)
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
