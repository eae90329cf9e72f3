"""Tests for the command runner and file reader."""

from __future__ import annotations

from pathlib import Path

import pytest
from conftest import make_symlink, write_file

from devinfo.errors import UtilityUnavailable
from devinfo.runner import CommandRunner, FileReader, shellquote


class TestShellquote:
    def test_plain(self) -> None:
        assert shellquote("switch0") == "'switch0'"

    def test_embedded_quote(self) -> None:
        assert shellquote("it's") == "'it'\\''s'"

    def test_metacharacters_survive_the_shell(self) -> None:
        value = "a; b $(c) 'd'"
        assert CommandRunner().read(f"printf %s {shellquote(value)}") == value


class TestCommandRunner:
    def test_lines(self) -> None:
        with CommandRunner().lines("printf 'one\\ntwo\\n'") as lines:
            assert list(lines) == ["one", "two"]

    def test_read(self) -> None:
        assert CommandRunner().read("echo hello") == "hello"

    def test_missing_binary_raises(self) -> None:
        with pytest.raises(UtilityUnavailable, match="Command not found") as exc_info:
            CommandRunner().read("devinfo-no-such-binary 2>/dev/null")

        assert exc_info.value.context["returncode"] == 127

    def test_missing_binary_in_lines(self) -> None:
        with pytest.raises(UtilityUnavailable):
            with CommandRunner().lines("/nonexistent/tool") as lines:
                assert list(lines) == []

    def test_not_executable_raises(self, tmp_path: Path) -> None:
        script = tmp_path / "tool"
        script.write_text("#!/bin/sh\necho hi\n")
        script.chmod(0o644)

        with pytest.raises(UtilityUnavailable, match="Permission denied"):
            CommandRunner().read(str(script))

    def test_other_failures_keep_output(self) -> None:
        assert CommandRunner().read("echo partial; exit 1") == "partial"

    def test_stop_reading_early(self) -> None:
        with CommandRunner().lines("yes devinfo") as lines:
            assert next(lines) == "devinfo"

    def test_status(self) -> None:
        runner = CommandRunner()
        assert runner.status("true") == 0
        assert runner.status("exit 3") == 3


class TestFileReader:
    def test_read_below_root(self, fs_root: Path) -> None:
        write_file(fs_root, "/proc/swaps", "Filename\n")
        files = FileReader(fs_root)

        assert files.read("/proc/swaps") == "Filename\n"
        assert files.exists("/proc/swaps")
        assert files.read("/proc/mounts") is None
        assert not files.exists("/proc/mounts")

    def test_read_str_and_int(self, fs_root: Path) -> None:
        write_file(fs_root, "/sys/class/block/sda/size", "1000\n")
        write_file(fs_root, "/sys/class/block/sda/ro", "\n")
        write_file(fs_root, "/sys/class/block/sda/model", "garbage\n")
        files = FileReader(fs_root)

        assert files.read_str("/sys/class/block/sda/size") == "1000"
        assert files.read_str("/sys/class/block/sda/ro") is None
        assert files.read_int("/sys/class/block/sda/size") == 1000
        assert files.read_int("/sys/class/block/sda/model") == 0
        assert files.read_int("/sys/class/block/sdb/size", default=-1) == -1

    def test_lines(self, fs_root: Path) -> None:
        write_file(fs_root, "/etc/init.d/led", "START=96\nSTOP=10\n")

        with FileReader(fs_root).lines("/etc/init.d/led") as lines:
            assert list(lines) == ["START=96", "STOP=10"]

    def test_lines_missing_file(self, fs_root: Path) -> None:
        with pytest.raises(OSError):
            with FileReader(fs_root).lines("/proc/net/nf_conntrack"):
                pass

    def test_readlink_and_dangling_links(self, fs_root: Path) -> None:
        make_symlink(fs_root, "/usr/sbin/ntpd", "/bin/busybox")
        files = FileReader(fs_root)

        assert files.readlink("/usr/sbin/ntpd") == "/bin/busybox"
        assert files.exists("/usr/sbin/ntpd")
        assert files.readlink("/usr/sbin/dropbear") is None

    def test_glob_returns_device_paths(self, fs_root: Path) -> None:
        write_file(fs_root, "/etc/init.d/network")
        write_file(fs_root, "/etc/init.d/dnsmasq")

        assert FileReader(fs_root).glob("/etc/init.d/*") == [
            "/etc/init.d/dnsmasq",
            "/etc/init.d/network",
        ]

    def test_statvfs(self, fs_root: Path) -> None:
        files = FileReader(fs_root)

        st = files.statvfs("/")
        assert st is not None
        assert st.f_blocks > 0
        assert files.statvfs("/mnt/missing") is None
