"""Switch handlers.

Switch capability and port link state via ``swconfig``.
"""

from __future__ import annotations

from typing import Any

from devinfo.errors import NoData
from devinfo.parsers.switch import parse_port_states, parse_switch_capabilities
from devinfo.rpc.router import register
from devinfo.runner import SystemContext, shellquote

DEFAULT_SWITCH = "switch0"


@register("getSwconfigFeatures", args={"switch": DEFAULT_SWITCH})
def handle_swconfig_features(ctx: SystemContext, *, switch: str) -> dict[str, Any]:
    """Report which VLAN/port options a switch driver supports."""
    cmd = f"swconfig dev {shellquote(str(switch))} help 2>/dev/null"
    with ctx.runner.lines(cmd) as lines:
        caps = parse_switch_capabilities(lines)

    features = caps.model_dump(exclude_unset=True)
    if not features:
        raise NoData("No such switch", context={"switch": switch})
    return features


@register("getSwconfigPortState", args={"switch": DEFAULT_SWITCH})
def handle_swconfig_port_state(ctx: SystemContext, *, switch: str) -> list[dict[str, Any]]:
    """Report link state of each switch port."""
    cmd = f"swconfig dev {shellquote(str(switch))} show 2>/dev/null"
    with ctx.runner.lines(cmd) as lines:
        ports = parse_port_states(lines)

    if not ports:
        raise NoData("No such switch", context={"switch": switch})
    return [port.model_dump() for port in ports]
