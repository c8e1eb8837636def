"""Bidirectional sync endpoints: favorites, watch history, ratings, state.

Pull endpoints return the desktop's view; the client owns its own cursor
(``since``). Push endpoints are safe to retry: favorites converge to the
same state and duplicate watch events are dropped by the store.
"""

import logging

from fastapi import APIRouter, Depends, Query

from vaultsync.api.deps import get_current_device_id, get_server, get_stats_store, get_sync_store
from vaultsync.schemas.sync import (
    FavoriteItem,
    FavoriteListResponse,
    FavoriteSyncRequest,
    HistoryItem,
    HistoryListResponse,
    HistorySyncRequest,
    RatingItem,
    RatingListResponse,
    SyncResultResponse,
    SyncStateResponse,
    SyncStatusResponse,
    WatchBatchRequest,
    WatchBatchResponse,
)
from vaultsync.services.collaborators import StatsStore, SyncStore
from vaultsync.sync_server import SyncServer
from vaultsync.utils.timestamps import now_ms

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sync", tags=["sync"])


@router.get("/favorites", response_model=FavoriteListResponse)
def get_favorites(sync_store: SyncStore = Depends(get_sync_store)):
    """Full snapshot of the desktop's favorites."""
    items = [FavoriteItem(**f) for f in sync_store.get_favorites()]
    return FavoriteListResponse(items=items, count=len(items), timestamp=now_ms())


@router.post("/favorites", response_model=SyncResultResponse)
def push_favorites(
    request: FavoriteSyncRequest,
    sync_store: SyncStore = Depends(get_sync_store),
    device_id: str = Depends(get_current_device_id),
):
    synced = sync_store.sync_favorites([item.model_dump() for item in request.items])
    logger.info("Synced %d/%d favorite(s) from device %s", synced, len(request.items), device_id)
    return SyncResultResponse(synced=synced)


@router.get("/history", response_model=HistoryListResponse)
def get_history(
    since: int | None = Query(default=None),
    sync_store: SyncStore = Depends(get_sync_store),
):
    """Watch history with lastViewedAt at or after ``since`` (everything if omitted)."""
    items = [HistoryItem(**h) for h in sync_store.get_watch_history(since)]
    return HistoryListResponse(items=items, count=len(items), timestamp=now_ms())


@router.post("/history", response_model=SyncResultResponse)
def push_history(
    request: HistorySyncRequest,
    sync_store: SyncStore = Depends(get_sync_store),
    device_id: str = Depends(get_current_device_id),
):
    synced = sync_store.sync_watch_history([item.model_dump() for item in request.items])
    logger.info("Synced %d/%d watch event(s) from device %s", synced, len(request.items), device_id)
    return SyncResultResponse(synced=synced)


@router.post("/watches", response_model=WatchBatchResponse)
def push_watches(
    request: WatchBatchRequest,
    stats_store: StatsStore = Depends(get_stats_store),
    device_id: str = Depends(get_current_device_id),
):
    """Bulk view upload; entries without viewedAt are stamped on arrival."""
    recorded = stats_store.bulk_record_views([v.model_dump() for v in request.views])
    logger.info("Bulk recorded %d view(s) from device %s", recorded, device_id)
    return WatchBatchResponse(recorded=recorded)


@router.get("/ratings", response_model=RatingListResponse)
def get_ratings(stats_store: StatsStore = Depends(get_stats_store)):
    items = [
        RatingItem(media_id=s.media_id, rating=s.rating, views=s.views)
        for s in stats_store.all_ratings()
    ]
    return RatingListResponse(items=items, count=len(items))


@router.get("/state", response_model=SyncStateResponse)
def get_sync_state(sync_store: SyncStore = Depends(get_sync_store)):
    return SyncStateResponse(**sync_store.get_sync_state())


@router.get("/status", response_model=SyncStatusResponse)
async def get_sync_status(server: SyncServer = Depends(get_server)):
    return SyncStatusResponse(last_sync=now_ms(), server_version=server.settings.version)
