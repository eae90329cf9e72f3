"""Parsers behind the feature probes: dnsmasq, ipset and firewall helpers."""

from __future__ import annotations

import logging
import re
import shlex
from collections.abc import Iterable
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

_COMPILE_OPTIONS = re.compile(r"^Compile time options: (.+)$", re.MULTILINE)


def parse_dnsmasq_options(version_output: str) -> dict[str, bool] | None:
    """Parse the ``Compile time options:`` line of ``dnsmasq --version``.

    ``no-dhcp6`` yields ``{"dhcp6": False}``, ``IPv6`` yields ``{"ipv6": True}``.
    Returns None when the line is missing.
    """
    m = _COMPILE_OPTIONS.search(version_output)
    if not m:
        return None

    options: dict[str, bool] = {}
    for token in m.group(1).split():
        name = token.removeprefix("no-")
        options[name.lower()] = name == token
    return options


SET_TYPES_HEADER = "Supported set types:"
_SET_TYPE = re.compile(r"^\s+([\w:,]+)\t+(\d+)\t")


class SetTypeScan(Enum):
    PREAMBLE = "preamble"
    SET_TYPES = "set_types"


def parse_ipset_types(lines: Iterable[str]) -> dict[str, list[int]]:
    """Parse the set type table of ``ipset --help``.

    Maps each set type to the revisions listed for it, in output order.
    """
    types: dict[str, list[int]] = {}
    state = SetTypeScan.PREAMBLE

    for line in lines:
        if state is SetTypeScan.PREAMBLE:
            if line == SET_TYPES_HEADER:
                state = SetTypeScan.SET_TYPES
            continue

        m = _SET_TYPE.match(line)
        if m:
            types.setdefault(m.group(1), []).append(int(m.group(2)))

    return types


def parse_uci(lines: Iterable[str]) -> list[dict[str, Any]]:
    """Parse a UCI configuration file into its sections.

    Each section is a dict with ``.type`` (and ``.name`` for named sections)
    plus its options; ``list`` entries accumulate into Python lists.
    """
    sections: list[dict[str, Any]] = []
    current: dict[str, Any] | None = None

    for lineno, line in enumerate(lines, start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        try:
            tokens = shlex.split(stripped, comments=True)
        except ValueError as exc:
            logger.debug("Skipping unparsable UCI line %d: %s", lineno, exc)
            continue
        if not tokens:
            continue

        keyword, args = tokens[0], tokens[1:]
        if keyword == "config" and args:
            current = {".type": args[0]}
            if len(args) > 1:
                current[".name"] = args[1]
            sections.append(current)
        elif keyword == "option" and len(args) >= 2 and current is not None:
            current[args[0]] = args[1]
        elif keyword == "list" and len(args) >= 2 and current is not None:
            existing = current.get(args[0])
            if not isinstance(existing, list):
                existing = [] if existing is None else [existing]
                current[args[0]] = existing
            existing.append(args[1])

    return sections


HELPER_FIELDS = ("name", "description", "module", "family", "proto", "port")


def parse_conntrack_helpers(lines: Iterable[str]) -> list[dict[str, Any]]:
    """Extract ``config helper`` sections from a firewall helpers file."""
    helpers = []
    for section in parse_uci(lines):
        if section[".type"] != "helper" or "name" not in section:
            continue
        helpers.append({key: section[key] for key in HELPER_FIELDS if key in section})
    return helpers
