"""Command runner and file reader.

These are the only places devinfo touches the host: every handler receives
them through a :class:`SystemContext` so tests can substitute a fake runner
and a temporary directory tree as filesystem root.
"""

from __future__ import annotations

import glob as _glob
import logging
import os
import subprocess
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, cast

from .errors import UtilityUnavailable

logger = logging.getLogger(__name__)

# Shell exit codes for "not executable" and "command not found"
SHELL_CANNOT_EXECUTE = 126
SHELL_NOT_FOUND = 127


def shellquote(value: str) -> str:
    """Quote a value for a POSIX shell: ``it's`` -> ``'it'\\''s'``."""
    return "'" + value.replace("'", "'\\''") + "'"


class CommandRunner:
    """Runs shell command strings and hands back their stdout."""

    @contextmanager
    def lines(self, cmd: str) -> Iterator[Iterator[str]]:
        """Stream stdout of ``cmd`` line by line.

        The pipe is closed and the process reaped when the block exits, also
        when the consumer stops reading early.

        Raises:
            UtilityUnavailable: The output was read to the end and the shell
                reported the command as missing or not executable.
        """
        proc = self._spawn(cmd)
        stdout = cast(IO[str], proc.stdout)
        drained = False

        def stream() -> Iterator[str]:
            nonlocal drained
            for line in stdout:
                yield line.rstrip("\n")
            drained = True

        try:
            yield stream()
        finally:
            stdout.close()
            returncode = proc.wait()

        # Only a fully read stream has a meaningful exit status.
        if drained and returncode in (SHELL_CANNOT_EXECUTE, SHELL_NOT_FOUND):
            logger.debug("exit %d: %s", returncode, cmd)
            raise UtilityUnavailable(
                "Command not found" if returncode == SHELL_NOT_FOUND else "Permission denied",
                context={"command": cmd, "returncode": returncode},
            )

    def read(self, cmd: str) -> str:
        """Return the complete stdout of ``cmd``."""
        with self.lines(cmd) as stream:
            return "\n".join(stream)

    def status(self, cmd: str) -> int:
        """Run ``cmd`` with output discarded and return its exit status."""
        try:
            completed = subprocess.run(
                cmd,
                shell=True,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=False,
            )
        except OSError as exc:
            raise UtilityUnavailable(exc.strerror or str(exc)) from exc
        return completed.returncode

    def _spawn(self, cmd: str) -> subprocess.Popen[str]:
        logger.debug("exec: %s", cmd)
        try:
            return subprocess.Popen(
                cmd,
                shell=True,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                text=True,
                errors="replace",
            )
        except OSError as exc:
            raise UtilityUnavailable(exc.strerror or str(exc)) from exc


class FileReader:
    """Read-only access to files below ``root``.

    Paths are always given in their on-device absolute form
    (``/proc/mounts``); ``root`` is prepended.
    """

    def __init__(self, root: Path | str = "/") -> None:
        self.root = Path(root)

    def path(self, path: str) -> Path:
        return self.root / path.lstrip("/")

    def exists(self, path: str) -> bool:
        return os.path.lexists(self.path(path))

    def read(self, path: str) -> str | None:
        """Return file contents, or None when the file cannot be read."""
        try:
            return self.path(path).read_text(errors="replace")
        except OSError:
            return None

    def read_str(self, path: str) -> str | None:
        """Return the stripped contents of a one-value file, None if unreadable or empty."""
        value = self.read(path)
        if value is None:
            return None
        return value.strip() or None

    def read_int(self, path: str, default: int = 0) -> int:
        value = self.read_str(path)
        try:
            return int(value) if value is not None else default
        except ValueError:
            return default

    @contextmanager
    def lines(self, path: str) -> Iterator[Iterator[str]]:
        """Stream the lines of ``path``; raises OSError when it cannot be opened."""
        with open(self.path(path), errors="replace") as fh:
            yield (line.rstrip("\n") for line in fh)

    def readlink(self, path: str) -> str | None:
        try:
            return os.readlink(self.path(path))
        except OSError:
            return None

    def glob(self, pattern: str) -> list[str]:
        """Expand ``pattern`` and return matches in on-device form, sorted."""
        prefix = str(self.root).rstrip("/")
        matches = _glob.glob(str(self.path(pattern)))
        return sorted("/" + m[len(prefix):].lstrip("/") for m in matches)

    def statvfs(self, path: str) -> os.statvfs_result | None:
        try:
            return os.statvfs(self.path(path))
        except OSError:
            return None


@dataclass
class SystemContext:
    """Collaborators a handler uses to look at the system."""

    runner: CommandRunner = field(default_factory=CommandRunner)
    files: FileReader = field(default_factory=FileReader)
