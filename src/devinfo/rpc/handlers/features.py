"""Feature handlers.

Capability detection and firewall conntrack helper listing.
"""

from __future__ import annotations

from typing import Any

from devinfo.errors import UtilityUnavailable
from devinfo.parsers.features import parse_conntrack_helpers
from devinfo.probes import find_helpers_file, probe_features
from devinfo.rpc.router import register
from devinfo.runner import SystemContext


@register("getFeatures", legacy=True)
def handle_features(ctx: SystemContext) -> dict[str, Any]:
    """Detect which optional OS components are installed."""
    return probe_features(ctx)


@register("getConntrackHelpers")
def handle_conntrack_helpers(ctx: SystemContext) -> list[dict[str, Any]]:
    """List the conntrack helpers the firewall knows about."""
    path = find_helpers_file(ctx)
    if path is None:
        return []

    try:
        with ctx.files.lines(path) as lines:
            return parse_conntrack_helpers(lines)
    except OSError as e:
        raise UtilityUnavailable(e.strerror or str(e)) from e
