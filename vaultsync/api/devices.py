"""Paired device listing for mobile clients."""

from fastapi import APIRouter, Depends

from vaultsync.api.deps import get_server
from vaultsync.models.device import PairedDevice
from vaultsync.schemas.auth import DeviceListResponse, DeviceResponse
from vaultsync.sync_server import SyncServer

router = APIRouter(tags=["devices"])


def device_to_response(d: PairedDevice) -> DeviceResponse:
    return DeviceResponse(
        id=d.id,
        name=d.name,
        platform=d.platform,
        paired_at=d.paired_at,
        last_seen=d.last_seen,
    )


@router.get("/devices", response_model=DeviceListResponse)
async def list_devices(server: SyncServer = Depends(get_server)):
    """List all paired devices (tokens are never exposed)."""
    return DeviceListResponse(devices=[device_to_response(d) for d in server.paired_devices()])
