"""btrfs command line tool implementation.

Queries and mutates subvolumes by running the ``btrfs`` CLI and parsing
its output.
"""

import logging
import os
import re

from btrfs_autosnap.core.errors import (
    OperationError,
    SubvolumeNotFoundError,
    SubvolumeToolError,
    SubvolumeVanishedError,
)
from btrfs_autosnap.models.subvolume import SnapshotRecord, SubvolumeInfo
from btrfs_autosnap.tools.base import SubvolumeTool
from btrfs_autosnap.utils.shell import CommandResult, command_exists, run_command

logger = logging.getLogger(__name__)

# "ID 257 gen 1021 top level 5 path home/user" (with -s: "cgen", "otime" too)
_PATH_RE = re.compile(r"(?:^|\s)path (?P<path>.*)$")
_GEN_RE = re.compile(r"(?:^|\s)gen (?P<gen>\d+)(?:\s|$)")

# "btrfs subvolume show" fields, e.g. "\tParent UUID: \t\t-"
_SHOW_FIELD_RE = re.compile(r"^\s*(?P<key>[A-Za-z][A-Za-z ]*?):\s*(?P<value>.*?)\s*$")

_NOT_FOUND_MARKERS = ("No such file or directory", "cannot access", "not found")


class BtrfsTool(SubvolumeTool):
    """Subvolume tool backed by the ``btrfs`` command.

    Attributes:
        command: Name or path of the btrfs executable.
    """

    def __init__(self, command: str = "btrfs") -> None:
        """Initialize the tool.

        Args:
            command: Name or path of the btrfs executable.
        """
        self._command = command

    @property
    def command(self) -> str:
        """Return the btrfs executable."""
        return self._command

    def is_available(self) -> bool:
        """Check if the btrfs CLI is available."""
        return command_exists(self._command)

    def list_subvolumes(self, path: str) -> list[str]:
        """List subvolumes below ``path`` using ``btrfs subvolume list -o``."""
        result = self._query(["subvolume", "list", "-o", path])
        return [self._parse_path(line) for line in result.stdout.splitlines()]

    def show_subvolume(self, path: str) -> SubvolumeInfo:
        """Read parent UUID and flags using ``btrfs subvolume show``.

        Raises:
            SubvolumeVanishedError: If the query failed because ``path`` is gone.
            SubvolumeToolError: If the query failed for any other reason.
        """
        try:
            result = self._query(["subvolume", "show", path])
        except SubvolumeToolError as e:
            if not os.path.lexists(path):
                raise SubvolumeVanishedError(path, str(e)) from e
            raise
        return self._parse_show(result.stdout)

    def list_snapshots(self, path: str) -> list[SnapshotRecord]:
        """List snapshots below ``path`` sorted by generation, newest first."""
        result = self._query(["subvolume", "list", "-o", "-s", "-g", "--sort=-gen", path])

        records: list[SnapshotRecord] = []
        for line in result.stdout.splitlines():
            if not line.strip():
                continue
            gen_match = _GEN_RE.search(line)
            rel = self._parse_path(line)
            if gen_match is None or not rel:
                logger.debug("Skipping malformed snapshot line: %r", line[:200])
                continue
            records.append(SnapshotRecord(path=rel, generation=int(gen_match.group("gen"))))
        return records

    def create_snapshot(self, source: str, destination: str, writable: bool = False) -> None:
        """Create a snapshot using ``btrfs subvolume snapshot``."""
        args = [self._command, "subvolume", "snapshot"]
        if not writable:
            args.append("-r")
        args.extend(["--", source, destination])

        result = self._run(args, destination)
        if not result.success:
            raise OperationError(destination, result.error_message)

    def delete_subvolume(self, path: str) -> None:
        """Delete a subvolume using ``btrfs subvolume delete``."""
        if not os.path.lexists(path):
            raise SubvolumeNotFoundError(path, "No such file or directory")

        result = self._run([self._command, "subvolume", "delete", "--", path], path)
        if result.success:
            return

        message = result.error_message
        if any(marker in message for marker in _NOT_FOUND_MARKERS) and not os.path.lexists(path):
            raise SubvolumeNotFoundError(path, message)
        raise OperationError(path, message)

    def _query(self, args: list[str]) -> CommandResult:
        """Run a read-only btrfs query, raising SubvolumeToolError on failure."""
        cmd = [self._command, *args]
        try:
            result = run_command(cmd)
        except OSError as e:
            msg = f"Cannot run {cmd[0]}: {e}"
            raise SubvolumeToolError(msg) from e

        if not result.success:
            msg = f"{' '.join(cmd)} failed: {result.error_message}"
            raise SubvolumeToolError(msg)
        return result

    @staticmethod
    def _run(args: list[str], path: str) -> CommandResult:
        """Run a btrfs mutation, raising OperationError if it cannot start."""
        logger.debug("Running: %s", " ".join(args))
        try:
            return run_command(args)
        except OSError as e:
            raise OperationError(path, f"Cannot run {args[0]}: {e}") from e

    @staticmethod
    def _parse_path(line: str) -> str:
        """Extract the trailing ``path <rel>`` field of a list line.

        Blank or unrecognized lines give an empty string, which discovery
        skips.
        """
        match = _PATH_RE.search(line.rstrip("\n"))
        if match is None:
            return ""
        return match.group("path").strip()

    @staticmethod
    def _parse_show(output: str) -> SubvolumeInfo:
        """Parse ``btrfs subvolume show`` output into SubvolumeInfo."""
        fields: dict[str, str] = {}
        for line in output.splitlines():
            match = _SHOW_FIELD_RE.match(line)
            if match is None:
                continue
            fields.setdefault(match.group("key").strip().lower(), match.group("value"))

        parent = fields.get("parent uuid", "-").strip()
        flags = fields.get("flags", "-").strip()

        return SubvolumeInfo(
            parent_uuid=None if parent in ("", "-") else parent,
            read_only="readonly" in flags.split(),
        )
