"""Storage handlers.

Block devices (``block info`` plus /proc/swaps) and mounted filesystems.
"""

from __future__ import annotations

import logging
from typing import Any

from devinfo.errors import UtilityUnavailable
from devinfo.models import BlockDevice, MountPoint, SwapDevice
from devinfo.parsers.storage import (
    SECTOR_SIZE,
    SWAP_UNIT,
    parse_block_info,
    parse_mounts,
    parse_swaps,
)
from devinfo.rpc.router import register
from devinfo.runner import SystemContext

logger = logging.getLogger(__name__)

BLOCK_INFO_COMMAND = "/sbin/block info 2>/dev/null"
PROC_SWAPS = "/proc/swaps"
PROC_MOUNTS = "/proc/mounts"


@register("getBlockDevices")
def handle_block_devices(ctx: SystemContext) -> dict[str, Any]:
    """List block devices and active swap areas.

    Disks are keyed by device name (``sda1``), swaps by ``swap_<path>`` so a
    swap file can never shadow a disk of the same name.
    """
    try:
        with ctx.runner.lines(BLOCK_INFO_COMMAND) as lines:
            found = parse_block_info(lines)
    except UtilityUnavailable as e:
        raise UtilityUnavailable("Unable to execute block utility") from e

    devices: dict[str, Any] = {}
    for name, attrs in found.items():
        sectors = ctx.files.read_int(f"/sys/class/block/{name}/size")
        record = {**attrs, "dev": f"/dev/{name}", "size": sectors * SECTOR_SIZE}
        devices[name] = BlockDevice.model_validate(record).model_dump()

    try:
        with ctx.files.lines(PROC_SWAPS) as lines:
            swaps = parse_swaps(lines)
    except OSError as e:
        logger.debug("Cannot read %s: %s", PROC_SWAPS, e)
        swaps = []

    for path, size_kib in swaps:
        devices[f"swap_{path}"] = SwapDevice(dev=path, size=size_kib * SWAP_UNIT).model_dump()

    return devices


@register("getMountPoints")
def handle_mount_points(ctx: SystemContext) -> list[dict[str, Any]]:
    """List mounted filesystems with their capacity.

    Filesystems reporting zero blocks (proc, sysfs, ...) are left out.
    """
    try:
        with ctx.files.lines(PROC_MOUNTS) as lines:
            entries = parse_mounts(lines)
    except OSError as e:
        raise UtilityUnavailable(e.strerror or str(e)) from e

    mounts = []
    for device, mount in entries:
        st = ctx.files.statvfs(mount)
        if st is None or st.f_blocks == 0:
            continue
        unit = st.f_frsize or st.f_bsize
        mounts.append(
            MountPoint(
                device=device,
                mount=mount,
                size=unit * st.f_blocks,
                avail=unit * st.f_bavail,
                free=unit * st.f_bfree,
            ).model_dump()
        )
    return mounts
