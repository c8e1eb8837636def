"""Paired device model."""

from typing import Literal

from vaultsync.schemas.base import CamelModel

Platform = Literal["ios", "android"]
PLATFORMS = ("ios", "android")


class PairedDevice(CamelModel):
    id: str
    name: str
    platform: Platform = "android"
    token: str
    paired_at: int  # epoch ms
    last_seen: int  # epoch ms
