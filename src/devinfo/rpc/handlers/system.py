"""System handlers.

Init scripts, LEDs, USB devices, processes, connection tracking, realtime
traffic statistics and the local clock.
"""

from __future__ import annotations

import logging
import posixpath
import time
from typing import Any

from devinfo.errors import InvalidArgument, UtilityUnavailable
from devinfo.parsers.system import (
    TOP_COMMAND,
    decode_bwc_samples,
    parse_conntrack,
    parse_init_script,
    parse_led_triggers,
    parse_top,
)
from devinfo.rpc.router import register
from devinfo.runner import SystemContext, shellquote

logger = logging.getLogger(__name__)


# -------------------------------------------------------------------------
# Init scripts
# -------------------------------------------------------------------------


def _init_enabled(ctx: SystemContext, script: str, start: int | None) -> bool:
    if start is None:
        return False
    return ctx.files.exists(f"/etc/rc.d/S{start:02d}{script}") or ctx.files.exists(
        f"/etc/rc.d/S{start}{script}"
    )


@register("getInitList", args={"name": None}, legacy=True)
def handle_init_list(ctx: SystemContext, *, name: str | None) -> dict[str, Any]:
    """List init scripts with their start/stop priority and enabled state."""
    scripts: dict[str, Any] = {}
    for path in ctx.files.glob("/etc/init.d/*"):
        script = posixpath.basename(path)
        if name and script != name:
            continue

        try:
            with ctx.files.lines(path) as lines:
                index = parse_init_script(lines)
        except OSError as e:
            logger.debug("Cannot read init script %s: %s", path, e)
            continue

        if not index:
            continue

        start = index.get("start")
        scripts[script] = {
            "enabled": _init_enabled(ctx, script, start),
            "index": start,
            "start": start,
            "stop": index.get("stop"),
        }
    return scripts


# -------------------------------------------------------------------------
# Hardware
# -------------------------------------------------------------------------


@register("getLEDs", legacy=True)
def handle_leds(ctx: SystemContext) -> dict[str, Any]:
    """List LEDs with their available and active triggers."""
    leds: dict[str, Any] = {}
    for path in ctx.files.glob("/sys/class/leds/*"):
        triggers, active = parse_led_triggers(ctx.files.read(f"{path}/trigger") or "")
        leds[posixpath.basename(path)] = {
            "triggers": triggers,
            "active_trigger": active,
            "brightness": ctx.files.read_int(f"{path}/brightness"),
            "max_brightness": ctx.files.read_int(f"{path}/max_brightness"),
        }
    return leds


USB_DEVICES = "/sys/bus/usb/devices"


def _usb_speed(value: str | None) -> float | int:
    # Low speed devices report "1.5"
    try:
        speed = float(value) if value is not None else 0.0
    except ValueError:
        return 0
    return int(speed) if speed.is_integer() else speed


@register("getUSBDevices", legacy=True)
def handle_usb_devices(ctx: SystemContext) -> dict[str, Any]:
    """List attached USB devices and hub ports."""
    files = ctx.files

    devices = []
    for path in files.glob(f"{USB_DEVICES}/[0-9]*/manufacturer"):
        base = posixpath.dirname(path)
        devices.append(
            {
                "id": posixpath.basename(base),
                "vid": files.read_str(f"{base}/idVendor"),
                "pid": files.read_str(f"{base}/idProduct"),
                "vendor": files.read_str(f"{base}/manufacturer"),
                "product": files.read_str(f"{base}/product"),
                "speed": _usb_speed(files.read_str(f"{base}/speed")),
            }
        )

    ports = []
    for path in files.glob(f"{USB_DEVICES}/*/*-port[0-9]*"):
        link = files.readlink(f"{path}/device")
        ports.append(
            {
                "port": posixpath.basename(path),
                "device": posixpath.basename(link) if link else None,
            }
        )

    return {"devices": devices, "ports": ports}


# -------------------------------------------------------------------------
# Processes and connections
# -------------------------------------------------------------------------


@register("getProcessList")
def handle_process_list(ctx: SystemContext) -> list[dict[str, str]]:
    """Snapshot of running processes from busybox top."""
    with ctx.runner.lines(TOP_COMMAND) as lines:
        return parse_top(lines)


PROC_CONNTRACK = "/proc/net/nf_conntrack"


@register("getConntrackList")
def handle_conntrack_list(ctx: SystemContext) -> list[dict[str, Any]]:
    """List tracked connections."""
    try:
        with ctx.files.lines(PROC_CONNTRACK) as lines:
            return parse_conntrack(lines)
    except OSError as e:
        raise UtilityUnavailable(e.strerror or str(e)) from e


# -------------------------------------------------------------------------
# Statistics and clock
# -------------------------------------------------------------------------

# mode -> luci-bwc flag; device-bound modes take the device as argument
BWC_MODES: dict[str, tuple[str, bool]] = {
    "interface": ("-i", True),
    "wireless": ("-r", True),
    "conntrack": ("-c", False),
    "load": ("-l", False),
}


@register("getRealtimeStats", args={"mode": "interface", "device": "eth0"})
def handle_realtime_stats(ctx: SystemContext, *, mode: str, device: str) -> list[Any]:
    """Return the bandwidth/load samples collected by luci-bwc."""
    if mode not in BWC_MODES:
        raise InvalidArgument("Invalid mode", context={"mode": mode})

    flag, takes_device = BWC_MODES[mode]
    cmd = f"luci-bwc {flag} {shellquote(str(device))}" if takes_device else f"luci-bwc {flag}"
    return decode_bwc_samples(ctx.runner.read(cmd))


@register("getLocaltime")
def handle_localtime(ctx: SystemContext) -> int:
    """Current system time as Unix epoch seconds."""
    return int(time.time())
