"""Logging setup.

Console logging goes through Rich on stderr. Unattended runs can also
log to syslog, tagged with the application name.
"""

import logging
import logging.handlers
import os

from rich.logging import RichHandler

from btrfs_autosnap.core.paths import APP_NAME
from btrfs_autosnap.utils.formatting import err_console

SYSLOG_SOCKET = "/dev/log"

logger = logging.getLogger(__name__)


def resolve_level(*, verbose: bool = False, debug: bool = False, quiet: bool = False) -> int:
    """Map verbosity flags to a logging level.

    ``--debug`` wins over ``--verbose``, which wins over ``--quiet``.
    """
    if debug:
        return logging.DEBUG
    if verbose:
        return logging.INFO
    if quiet:
        return logging.ERROR
    return logging.WARNING


def configure_logging(
    *,
    verbose: bool = False,
    debug: bool = False,
    quiet: bool = False,
    syslog: bool = False,
) -> None:
    """Configure the root logger for a run.

    Replaces handlers installed by an earlier call, so it is safe to call
    once per command invocation.

    Args:
        verbose: Log informational messages.
        debug: Log debugging messages.
        quiet: Log errors only.
        syslog: Also send INFO and above to the system log.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_btrfs_autosnap", False):
            root.removeHandler(handler)
            handler.close()

    level = resolve_level(verbose=verbose, debug=debug, quiet=quiet)

    console_handler = RichHandler(console=err_console, show_path=debug, rich_tracebacks=debug)
    console_handler.setLevel(level)
    _install(root, console_handler)

    if syslog:
        syslog_handler = _create_syslog_handler()
        if syslog_handler is not None:
            syslog_handler.setLevel(min(level, logging.INFO))
            _install(root, syslog_handler)

    root.setLevel(min(h.level for h in root.handlers if getattr(h, "_btrfs_autosnap", False)))


def _create_syslog_handler() -> logging.Handler | None:
    """Create a syslog handler, or None if the syslog socket is unavailable."""
    if not os.path.exists(SYSLOG_SOCKET):
        logger.warning("Syslog socket %s not found, not logging to syslog", SYSLOG_SOCKET)
        return None

    try:
        handler = logging.handlers.SysLogHandler(address=SYSLOG_SOCKET)
    except OSError as e:
        logger.warning("Cannot connect to syslog: %s", e)
        return None

    handler.setFormatter(logging.Formatter(f"{APP_NAME}[%(process)d]: %(message)s"))
    return handler


def _install(root: logging.Logger, handler: logging.Handler) -> None:
    handler._btrfs_autosnap = True  # type: ignore[attr-defined]
    root.addHandler(handler)
