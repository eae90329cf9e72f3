"""Line-oriented parsers for command output and kernel pseudo-files.

Parsers never run commands or open files; they consume lines (or text) and
return records, so they can be tested against captured output.
"""

from __future__ import annotations

from .features import (
    parse_conntrack_helpers,
    parse_dnsmasq_options,
    parse_ipset_types,
    parse_uci,
)
from .storage import decode_octal, parse_block_info, parse_mounts, parse_swaps
from .switch import parse_port_states, parse_switch_capabilities
from .system import (
    decode_bwc_samples,
    parse_conntrack,
    parse_init_script,
    parse_led_triggers,
    parse_top,
)

__all__ = [
    "decode_bwc_samples",
    "decode_octal",
    "parse_block_info",
    "parse_conntrack",
    "parse_conntrack_helpers",
    "parse_dnsmasq_options",
    "parse_init_script",
    "parse_ipset_types",
    "parse_led_triggers",
    "parse_mounts",
    "parse_port_states",
    "parse_swaps",
    "parse_switch_capabilities",
    "parse_top",
    "parse_uci",
]
