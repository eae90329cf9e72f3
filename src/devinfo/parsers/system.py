"""Parsers for init scripts, LED triggers, process and conntrack tables."""

from __future__ import annotations

import ipaddress
import json
import re
from collections.abc import Iterable
from typing import Any

from ..errors import MalformedInput

# =============================================================================
# Init scripts
# =============================================================================

_INIT_INDEX = re.compile(r"""^(START|STOP)=['"]?(\d+)['"]?\s*$""")


def parse_init_script(lines: Iterable[str]) -> dict[str, int]:
    """Read the ``START=``/``STOP=`` header variables of an init script."""
    index: dict[str, int] = {}
    for line in lines:
        m = _INIT_INDEX.match(line)
        if m:
            index[m.group(1).lower()] = int(m.group(2))
    return index


# =============================================================================
# LEDs
# =============================================================================


def parse_led_triggers(text: str) -> tuple[list[str], str | None]:
    """Split ``/sys/class/leds/*/trigger``; the bracketed entry is active."""
    triggers: list[str] = []
    active = None
    for token in text.split():
        name = token.strip("[]")
        if name != token:
            active = name
        triggers.append(name)
    return triggers, active


# =============================================================================
# Process list (busybox top -bn1)
# =============================================================================

TOP_COMMAND = "/bin/busybox top -bn1"

_TOP_ROW = re.compile(
    r"^(\d+) +(\d+) +(.+) +([RSDZTWI][<NW ][<N ]) +(\d+m?) +(\d+%) +(\d+%) +(.+)$"
)


def parse_top(lines: Iterable[str]) -> list[dict[str, str]]:
    """Parse the process rows of busybox ``top`` batch output."""
    processes = []
    for line in lines:
        m = _TOP_ROW.match(line.strip())
        if not m or m.group(8) == TOP_COMMAND:
            continue
        processes.append(
            {
                "PID": m.group(1),
                "PPID": m.group(2),
                "USER": m.group(3).strip(),
                "STAT": m.group(4).strip(),
                "VSZ": m.group(5),
                "%MEM": m.group(6),
                "%CPU": m.group(7),
                "COMMAND": m.group(8),
            }
        )
    return processes


# =============================================================================
# Connection tracking (/proc/net/nf_conntrack)
# =============================================================================

_CONNTRACK_ROW = re.compile(r"^(ipv[46])\s+\d+\s+(\S+)\s+\d+\s+(\d+)(.*)$")
_KEY_VALUE = re.compile(r"(\w+)=(\S+)")


def _normalize_address(value: str) -> str:
    try:
        return ipaddress.ip_address(value).compressed
    except ValueError:
        return value


def parse_conntrack(lines: Iterable[str]) -> list[dict[str, Any]]:
    """Parse tracked flows.

    Addresses and ports come from the original direction (first occurrence);
    packet and byte counters are summed over both directions.
    """
    flows = []
    for line in lines:
        m = _CONNTRACK_ROW.match(line)
        if not m:
            continue

        flow: dict[str, Any] = {
            "layer3": m.group(1),
            "layer4": m.group(2),
            "timeout": int(m.group(3)),
            "bytes": 0,
            "packets": 0,
        }
        for key, value in _KEY_VALUE.findall(m.group(4)):
            if key in ("bytes", "packets"):
                flow[key] += int(value)
            elif key in ("src", "dst"):
                flow.setdefault(key, _normalize_address(value))
            elif key in ("sport", "dport"):
                flow.setdefault(key, int(value))
            else:
                flow[key] = value
        flows.append(flow)
    return flows


# =============================================================================
# Bandwidth samples (luci-bwc)
# =============================================================================


def decode_bwc_samples(text: str) -> list[Any]:
    """Decode luci-bwc output, a comma separated run of JSON arrays."""
    try:
        samples = json.loads(f"[{text}]")
    except json.JSONDecodeError as exc:
        raise MalformedInput(str(exc)) from exc
    return samples
