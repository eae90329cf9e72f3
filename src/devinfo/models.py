from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class SwitchCapabilities(BaseModel):
    """Switch properties scraped from ``swconfig dev <switch> help``.

    Fields are filled in as the help text is scanned; anything the text never
    mentions stays unset and is left out of ``model_dump(exclude_unset=True)``.
    """

    switch_title: str | None = None
    num_vlans: int | None = None
    min_vid: int | None = None
    vid_option: str | None = None
    vlan4k_option: str | None = None
    vlan_option: str | None = None
    learning_option: str | None = None
    mirror_option: str | None = None
    jumbo_option: str | None = None


class SwitchPort(BaseModel):
    port: int
    duplex: bool = False
    speed: int = Field(default=0, description="Link speed in Mbps; 0 when unknown")
    link: bool = False
    auto: bool = False
    rxflow: bool = False
    txflow: bool = False


class BlockDevice(BaseModel):
    """A disk or partition; extra attributes (uuid, label, ...) kept verbatim."""

    model_config = ConfigDict(extra="allow")

    dev: str
    size: int = Field(default=0, description="Size in bytes")


class SwapDevice(BaseModel):
    type: Literal["swap"] = "swap"
    dev: str
    size: int = Field(default=0, description="Size in bytes")


class MountPoint(BaseModel):
    device: str
    mount: str
    size: int
    avail: int
    free: int
