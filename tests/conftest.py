from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import pytest

from devinfo.errors import UtilityUnavailable
from devinfo.rpc.router import RpcRegistry, get_registry, register_handlers
from devinfo.runner import CommandRunner, FileReader, SystemContext


class FakeRunner(CommandRunner):
    """Command runner answering from canned output instead of spawning processes.

    Commands without canned output produce no output and exit 127, like a
    missing binary run through the shell.
    """

    def __init__(
        self,
        outputs: dict[str, str] | None = None,
        statuses: dict[str, int] | None = None,
        unavailable: set[str] | None = None,
    ) -> None:
        self.outputs = outputs or {}
        self.statuses = statuses or {}
        self.unavailable = unavailable or set()
        self.calls: list[str] = []
        self.closed: list[str] = []

    @contextmanager
    def lines(self, cmd: str) -> Iterator[Iterator[str]]:
        self.calls.append(cmd)
        if cmd in self.unavailable:
            raise UtilityUnavailable("No such file or directory")
        try:
            yield iter(self.outputs.get(cmd, "").splitlines())
        finally:
            self.closed.append(cmd)

    def status(self, cmd: str) -> int:
        self.calls.append(cmd)
        if cmd in self.unavailable:
            raise UtilityUnavailable("No such file or directory")
        return self.statuses.get(cmd, 127)


def write_file(root: Path, path: str, content: str = "") -> Path:
    """Create ``path`` (on-device form) below ``root``."""
    target = root / path.lstrip("/")
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content)
    return target


def make_symlink(root: Path, path: str, target: str) -> Path:
    link = root / path.lstrip("/")
    link.parent.mkdir(parents=True, exist_ok=True)
    os.symlink(target, link)
    return link


@pytest.fixture
def fs_root(tmp_path: Path) -> Path:
    """Empty directory standing in for the device's filesystem root."""
    root = tmp_path / "rootfs"
    root.mkdir()
    return root


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def ctx(fs_root: Path, runner: FakeRunner) -> SystemContext:
    return SystemContext(runner=runner, files=FileReader(fs_root))


@pytest.fixture
def registry() -> RpcRegistry:
    """The application's method table with every handler registered."""
    register_handlers()
    return get_registry()
