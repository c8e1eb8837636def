"""Public endpoints: health ping and device pairing."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from vaultsync.schemas.auth import PairRequest, PairResponse, PairStatusResponse
from vaultsync.services.errors import PairingRejected
from vaultsync.sync_server import SyncServer
from vaultsync.api.deps import get_server

router = APIRouter(tags=["pairing"])


@router.get("/ping")
async def ping(server: SyncServer = Depends(get_server)):
    """Lightweight health check (no auth required)."""
    return {"status": "ok", "version": server.settings.version}


@router.post("/pair", response_model=PairResponse)
async def pair(request: PairRequest, server: SyncServer = Depends(get_server)):
    """Redeem a pairing code shown on the desktop for a device token."""
    try:
        device = server.pairing.consume(request.code, request.device_name, request.platform)
    except PairingRejected as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return PairResponse(device_id=device.id, token=device.token)


@router.get("/pair/status", response_model=PairStatusResponse, response_model_exclude_none=True)
async def pair_status(
    code: str | None = Query(default=None),
    server: SyncServer = Depends(get_server),
):
    """Poll whether a pairing code is still redeemable."""
    if not code:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing code")
    return PairStatusResponse(**server.pairing.status(code))
