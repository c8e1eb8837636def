"""Desktop-side management endpoints (loopback clients only)."""

from fastapi import APIRouter, Depends, HTTPException

from vaultsync.api.deps import get_server
from vaultsync.api.devices import device_to_response
from vaultsync.schemas.auth import DeviceListResponse, PairingCodeResponse, ServerStatusResponse
from vaultsync.sync_server import SyncServer

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/pairing-code", response_model=PairingCodeResponse)
async def generate_pairing_code(server: SyncServer = Depends(get_server)):
    """Generate a pairing code and the QR payload to display on the desktop."""
    ticket = server.generate_pairing_code()
    return PairingCodeResponse(code=ticket.code, expires_at=ticket.expires_at, qr_data=ticket.qr_data)


@router.get("/status", response_model=ServerStatusResponse)
async def server_status(server: SyncServer = Depends(get_server)):
    return ServerStatusResponse(**server.status())


@router.get("/devices", response_model=DeviceListResponse)
async def list_paired_devices(server: SyncServer = Depends(get_server)):
    return DeviceListResponse(devices=[device_to_response(d) for d in server.paired_devices()])


@router.delete("/devices/{device_id}")
async def unpair_device(device_id: str, server: SyncServer = Depends(get_server)):
    """Revoke a device. Its token stops working immediately."""
    if not server.unpair_device(device_id):
        raise HTTPException(status_code=404, detail="Device not found")
    return {"success": True}
