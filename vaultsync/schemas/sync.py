"""Bidirectional sync schemas."""

from typing import Optional

from vaultsync.schemas.base import CamelModel


class FavoriteSyncItem(CamelModel):
    media_id: str
    is_favorite: bool
    timestamp: Optional[int] = None


class FavoriteSyncRequest(CamelModel):
    items: list[FavoriteSyncItem]


class FavoriteItem(CamelModel):
    media_id: str
    is_favorite: bool
    rating: int
    timestamp: int


class FavoriteListResponse(CamelModel):
    items: list[FavoriteItem]
    count: int
    timestamp: int


class HistorySyncItem(CamelModel):
    media_id: str
    viewed_at: int


class HistorySyncRequest(CamelModel):
    items: list[HistorySyncItem]


class HistoryItem(CamelModel):
    media_id: str
    views: int
    last_viewed_at: int


class HistoryListResponse(CamelModel):
    items: list[HistoryItem]
    count: int
    timestamp: int


class SyncResultResponse(CamelModel):
    success: bool = True
    synced: int


class WatchItem(CamelModel):
    media_id: str
    viewed_at: Optional[int] = None


class WatchBatchRequest(CamelModel):
    views: list[WatchItem]


class WatchBatchResponse(CamelModel):
    success: bool = True
    recorded: int


class RatingItem(CamelModel):
    media_id: str
    rating: int
    views: int


class RatingListResponse(CamelModel):
    items: list[RatingItem]
    count: int


class SyncStateResponse(CamelModel):
    last_sync: int
    media_count: int
    favorites_count: int


class SyncStatusResponse(CamelModel):
    last_sync: int
    server_version: str
