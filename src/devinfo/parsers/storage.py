"""Parsers for block device, swap and mount listings."""

from __future__ import annotations

import re
from collections.abc import Iterable

SECTOR_SIZE = 512
SWAP_UNIT = 1024

_DEVICE_LINE = re.compile(r"^/dev/([^:]+):")
_ATTRIBUTE = re.compile(r'\s(\w+)="([^"]*)"')
_SWAP_LINE = re.compile(r"^(/\S+)\s+\S+\s+(\d+)")
_OCTAL_ESCAPE = re.compile(rb"\\([0-3][0-7]{2})")


def decode_octal(value: str) -> str:
    r"""Decode ``\NNN`` escapes as used by /proc/mounts and /proc/swaps.

    Escapes are decoded to raw bytes first so escaped UTF-8 sequences come
    back as the original characters.
    """
    if "\\" not in value:
        return value
    raw = _OCTAL_ESCAPE.sub(
        lambda m: bytes([int(m.group(1), 8)]),
        value.encode("utf-8", "surrogateescape"),
    )
    return raw.decode("utf-8", "replace")


def parse_block_info(lines: Iterable[str]) -> dict[str, dict[str, str]]:
    """Parse ``block info`` output.

    Returns ``{device_name: {attribute: value}}`` where device_name is the
    node below /dev (``sda1``) and attribute keys are lower-cased.
    """
    devices: dict[str, dict[str, str]] = {}
    for line in lines:
        m = _DEVICE_LINE.match(line)
        if not m:
            continue
        attrs = devices.setdefault(m.group(1), {})
        for key, value in _ATTRIBUTE.findall(line[m.end():]):
            attrs[key.lower()] = value
    return devices


def parse_swaps(lines: Iterable[str]) -> list[tuple[str, int]]:
    """Parse /proc/swaps into ``(path, size_kib)`` pairs; the header is skipped."""
    swaps: list[tuple[str, int]] = []
    for line in lines:
        m = _SWAP_LINE.match(line)
        if m:
            swaps.append((decode_octal(m.group(1)), int(m.group(2))))
    return swaps


def parse_mounts(lines: Iterable[str]) -> list[tuple[str, str]]:
    """Parse /proc/mounts into decoded ``(device, mount_point)`` pairs."""
    mounts: list[tuple[str, str]] = []
    for line in lines:
        fields = line.split()
        if len(fields) < 2:
            continue
        mounts.append((decode_octal(fields[0]), decode_octal(fields[1])))
    return mounts
