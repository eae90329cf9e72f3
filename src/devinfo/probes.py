"""Feature detection for the ``getFeatures`` method.

Most features are plain existence checks and always appear as booleans.
The remaining probes depend on a binary or file being present; when it is
missing (or the probe fails) their keys are left out entirely.
"""

from __future__ import annotations

import logging
import posixpath
from collections.abc import Callable
from typing import Any

from .errors import DevinfoError
from .parsers.features import (
    parse_conntrack_helpers,
    parse_dnsmasq_options,
    parse_ipset_types,
)
from .runner import SystemContext

logger = logging.getLogger(__name__)

# feature -> paths; the feature is present if any of them exists
EXISTENCE_PROBES: dict[str, tuple[str, ...]] = {
    "firewall": ("/sbin/fw3",),
    "firewall4": ("/sbin/fw4",),
    "opkg": ("/bin/opkg",),
    "apk": ("/usr/bin/apk",),
    "bonding": ("/sys/module/bonding",),
    "mii_tool": ("/usr/sbin/mii-tool",),
    "br2684ctl": ("/usr/sbin/br2684ctl",),
    "swconfig": ("/sbin/swconfig", "/usr/sbin/swconfig"),
    "odhcpd": ("/usr/sbin/odhcpd",),
    "zram": ("/sys/class/zram-control",),
    "ipv6": ("/proc/net/ipv6_route",),
    "dropbear": ("/usr/sbin/dropbear",),
    "cabundle": ("/etc/ssl/certs/ca-certificates.crt",),
    "relayd": ("/usr/sbin/relayd",),
    "wifi": ("/sbin/wifi",),
    "vrf": ("/sys/module/vrf/refcnt",),
}

OFFLOAD_REFCNT_PATHS = (
    "/sys/module/xt_FLOWOFFLOAD/refcnt",
    "/sys/module/nft_flow_offload/refcnt",
)

WIFI_FEATURES = (
    "eap", "11ac", "11ax", "11be", "11r", "acs",
    "sae", "owe", "suiteb192", "wep", "wps", "ocv",
)

# feature key -> (daemon binary, companion cli binary)
WIFI_DAEMONS: dict[str, tuple[str, str]] = {
    "hostapd": ("/usr/sbin/hostapd", "/usr/sbin/hostapd_cli"),
    "wpasupplicant": ("/usr/sbin/wpa_supplicant", "/usr/sbin/wpa_cli"),
}

HELPERS_PATHS = ("/usr/share/firewall4/helpers", "/usr/share/fw3/helpers.conf")

SYS_CLASS_NET = "/sys/class/net"
ARPHRD_LOOPBACK = "772"


def _offloading(ctx: SystemContext) -> bool:
    return any(ctx.files.exists(path) for path in OFFLOAD_REFCNT_PATHS)


def _wifi_daemon(ctx: SystemContext, binary: str, cli: str) -> dict[str, bool] | None:
    if not ctx.files.exists(binary):
        return None

    flags = {"cli": ctx.files.exists(cli)}
    for feature in WIFI_FEATURES:
        flags[feature] = ctx.runner.status(f"{binary} -v{feature} >/dev/null 2>/dev/null") == 0
    return flags


def _dnsmasq(ctx: SystemContext) -> dict[str, bool] | None:
    return parse_dnsmasq_options(ctx.runner.read("dnsmasq --version 2>/dev/null"))


def _ipset(ctx: SystemContext) -> dict[str, list[int]] | None:
    with ctx.runner.lines("ipset --help 2>/dev/null") as lines:
        types = parse_ipset_types(lines)
    return types or None


def find_helpers_file(ctx: SystemContext) -> str | None:
    for path in HELPERS_PATHS:
        if ctx.files.exists(path):
            return path
    return None


def _conntrack_helpers(ctx: SystemContext) -> list[str] | None:
    path = find_helpers_file(ctx)
    if path is None:
        return None
    with ctx.files.lines(path) as lines:
        return [helper["name"] for helper in parse_conntrack_helpers(lines)]


def netdev_role(ctx: SystemContext, name: str) -> str:
    """Classify a network device by what sysfs exposes for it."""
    base = posixpath.join(SYS_CLASS_NET, name)
    files = ctx.files

    if files.exists(f"{base}/bridge"):
        return "bridge"
    if files.exists(f"{base}/bonding"):
        return "bond"
    if files.exists(f"{base}/wireless") or files.exists(f"{base}/phy80211"):
        return "wireless"
    if files.exists(f"/proc/net/vlan/{name}"):
        return "vlan"
    if files.exists(f"{base}/dsa"):
        return "dsa"

    dev_type = (files.read(f"{base}/type") or "").strip()
    if dev_type == ARPHRD_LOOPBACK:
        return "loopback"
    if files.readlink(f"{base}/device") is None:
        return "virtual"
    return "ethernet"


def _netdev(ctx: SystemContext) -> dict[str, str] | None:
    if not ctx.files.exists(SYS_CLASS_NET):
        return None
    return {
        posixpath.basename(path): netdev_role(ctx, posixpath.basename(path))
        for path in ctx.files.glob(f"{SYS_CLASS_NET}/*")
    }


OptionalProbe = Callable[[SystemContext], Any]

OPTIONAL_PROBES: dict[str, OptionalProbe] = {
    "dnsmasq": _dnsmasq,
    "ipset": _ipset,
    "conntrack_helpers": _conntrack_helpers,
    "netdev": _netdev,
}


def probe_features(ctx: SystemContext) -> dict[str, Any]:
    """Detect optional OS capabilities.

    Returns:
        Flat dict of feature flags. Existence checks are always present;
        keys of probes whose prerequisite is missing are omitted.
    """
    files = ctx.files
    features: dict[str, Any] = {
        name: any(files.exists(path) for path in paths)
        for name, paths in EXISTENCE_PROBES.items()
    }
    features["offloading"] = _offloading(ctx)
    features["sysntpd"] = files.readlink("/usr/sbin/ntpd") is not None

    for name, (binary, cli) in WIFI_DAEMONS.items():
        try:
            flags = _wifi_daemon(ctx, binary, cli)
        except DevinfoError as e:
            logger.debug("WiFi probe %s failed: %s", name, e.message)
            continue
        if flags is not None:
            features[name] = flags

    for name, probe in OPTIONAL_PROBES.items():
        try:
            value = probe(ctx)
        except DevinfoError as e:
            logger.debug("Feature probe %s failed: %s", name, e.message)
            continue
        except OSError as e:
            logger.debug("Feature probe %s failed: %s", name, e)
            continue
        if value is not None:
            features[name] = value

    return features
