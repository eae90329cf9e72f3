"""Parsers for ``swconfig`` output.

Both parsers are pure: they take the command's output lines and return
records. Running ``swconfig`` is the handler's job.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from enum import Enum

from ..models import SwitchCapabilities, SwitchPort

# =============================================================================
# Switch capabilities (swconfig dev <switch> help)
# =============================================================================

DEFAULT_VLAN_COUNT = 16

_VLAN_ATTRS = re.compile(r"^\s+--vlan")
_PORT_ATTRS = re.compile(r"^\s+--port")
_CPU_PORT = re.compile(r"cpu @")
_SWITCH_TITLE = re.compile(r"^switch\d+: \w+\(([^)]+)\)")
_VLAN_COUNT = re.compile(r"vlans: (\d+)")
_VID_OPTION = re.compile(r": (pvid|tag|vid)")
_OPTION_NAME = re.compile(r": (\w+)")

# Checked in order; enable_vlan4k must win over its prefix enable_vlan.
_FIXED_OPTIONS: tuple[tuple[re.Pattern[str], str, str], ...] = (
    (re.compile(r": enable_vlan4k"), "vlan4k_option", "enable_vlan4k"),
    (re.compile(r": enable_vlan"), "vlan_option", "enable_vlan"),
    (re.compile(r": enable_learning"), "learning_option", "enable_learning"),
    (re.compile(r": enable_mirror_rx"), "mirror_option", "enable_mirror_rx"),
    (re.compile(r": max_length"), "jumbo_option", "max_length"),
)


class AttrBlock(Enum):
    """Which ``--<section>`` of the help text the scanner is in."""

    OTHER = "other"
    VLAN = "vlan"
    PORT = "port"


def _scan_capability_line(
    line: str, block: AttrBlock, caps: SwitchCapabilities
) -> AttrBlock:
    """Apply one help-text line to ``caps`` and return the next block state."""
    if _VLAN_ATTRS.match(line):
        return AttrBlock.VLAN

    if _PORT_ATTRS.match(line):
        return AttrBlock.PORT

    if _CPU_PORT.search(line):
        title = _SWITCH_TITLE.match(line)
        if title:
            caps.switch_title = title.group(1)
        count = _VLAN_COUNT.search(line)
        caps.num_vlans = int(count.group(1)) if count else DEFAULT_VLAN_COUNT
        caps.min_vid = 1
        return block

    if block is AttrBlock.VLAN and _VID_OPTION.search(line):
        name = _OPTION_NAME.search(line)
        if name:
            caps.vid_option = name.group(1)
        return block

    for pattern, field_name, option in _FIXED_OPTIONS:
        if pattern.search(line):
            setattr(caps, field_name, option)
            break

    return block


def parse_switch_capabilities(lines: Iterable[str]) -> SwitchCapabilities:
    """Build a :class:`SwitchCapabilities` from ``swconfig ... help`` output.

    The result may have no fields set; callers decide what that means.
    """
    caps = SwitchCapabilities()
    block = AttrBlock.OTHER
    for line in lines:
        block = _scan_capability_line(line, block, caps)
    return caps


# =============================================================================
# Port link state (swconfig dev <switch> show)
# =============================================================================

_VLAN_TABLE = re.compile(r"^VLAN \d+:")
_PORT_HEADER = re.compile(r"^Port (\d+):")
_FULL_DUPLEX = re.compile(r"full[ -]duplex")
# Priority order; the first one that matches while speed is unset wins.
_SPEED_PATTERNS = (
    re.compile(r"speed:(\d+)"),
    re.compile(r"(\d+) Mbps"),
    re.compile(r"link: ?(\d+)"),
)
_LINK_UP = re.compile(r"(link|status): ?up")
_AUTONEG = re.compile(r"auto-negotiate|link:.*auto")
_RX_FLOW = re.compile(r"link:.*rxflow")
_TX_FLOW = re.compile(r"link:.*txflow")


class PortScan(Enum):
    BEFORE_PORTS = "before_ports"
    IN_PORT = "in_port"


def _apply_port_line(line: str, port: SwitchPort) -> None:
    if _FULL_DUPLEX.search(line):
        port.duplex = True

    if not port.speed:
        for pattern in _SPEED_PATTERNS:
            m = pattern.search(line)
            if m and int(m.group(1)):
                port.speed = int(m.group(1))
                break

    if _LINK_UP.search(line):
        port.link = True
    if _AUTONEG.search(line):
        port.auto = True
    if _RX_FLOW.search(line):
        port.rxflow = True
    if _TX_FLOW.search(line):
        port.txflow = True


def parse_port_states(lines: Iterable[str]) -> list[SwitchPort]:
    """Collect per-port link state from ``swconfig ... show`` output.

    Stops at the first VLAN table that follows a port block; VLAN tables
    carry membership, not link state.
    """
    ports: list[SwitchPort] = []
    state = PortScan.BEFORE_PORTS

    for line in lines:
        if state is PortScan.IN_PORT and _VLAN_TABLE.match(line):
            break

        header = _PORT_HEADER.match(line)
        if header:
            ports.append(SwitchPort(port=int(header.group(1))))
            state = PortScan.IN_PORT

        if state is PortScan.IN_PORT:
            _apply_port_line(line, ports[-1])

    return ports
