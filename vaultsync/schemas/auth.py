"""Pairing and device request/response schemas."""

from typing import Optional

from vaultsync.schemas.base import CamelModel


# --- Pairing ---

class PairRequest(CamelModel):
    code: str = ""
    device_name: str = ""
    platform: Optional[str] = None  # 'ios' | 'android'


class PairResponse(CamelModel):
    success: bool = True
    device_id: str
    token: str


class PairStatusResponse(CamelModel):
    valid: bool
    expires_at: Optional[int] = None
    remaining_ms: Optional[int] = None
    reason: Optional[str] = None  # 'not_found' | 'expired'


class PairingCodeResponse(CamelModel):
    code: str
    expires_at: int
    qr_data: str


# --- Devices ---

class DeviceResponse(CamelModel):
    id: str
    name: str
    platform: str
    paired_at: int
    last_seen: int


class DeviceListResponse(CamelModel):
    devices: list[DeviceResponse]


class ServerStatusResponse(CamelModel):
    running: bool
    port: int
    addresses: list[str]
    paired_devices: int
