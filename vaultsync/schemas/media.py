"""Library, media and playlist schemas."""

from typing import Optional

from vaultsync.schemas.base import CamelModel


class MediaItemResponse(CamelModel):
    id: str
    filename: str
    type: str
    duration_sec: Optional[float]
    size_bytes: int
    width: Optional[int]
    height: Optional[int]
    added_at: int
    rating: int
    view_count: int
    tags: list[str]
    has_thumb: bool


class LibraryResponse(CamelModel):
    items: list[MediaItemResponse]
    page: int
    limit: int
    has_more: bool
    total_count: Optional[int] = None


class RateRequest(CamelModel):
    rating: Optional[float] = None


class RateResponse(CamelModel):
    success: bool = True
    media_id: str
    rating: int
    views: int


class ViewResponse(CamelModel):
    success: bool = True
    media_id: str
    views: int
    last_viewed_at: Optional[int]


class StatsResponse(CamelModel):
    media_id: str
    rating: int = 0
    views: int = 0
    o_count: int = 0
    last_viewed_at: Optional[int] = None


# --- Markers ---

class MarkerRequest(CamelModel):
    time_sec: Optional[float] = None
    title: str = ""


class MarkerResponse(CamelModel):
    id: str
    media_id: str
    time_sec: float
    title: str
    created_at: int


class MarkerListResponse(CamelModel):
    media_id: str
    markers: list[MarkerResponse]


class MarkerCreateResponse(CamelModel):
    success: bool = True
    marker: MarkerResponse


# --- Playlists ---

class PlaylistResponse(CamelModel):
    id: str
    name: str
    item_count: int
    created_at: int
    is_smart: bool


class PlaylistListResponse(CamelModel):
    items: list[PlaylistResponse]


class PlaylistItemResponse(CamelModel):
    id: str
    filename: str
    type: str
    duration_sec: Optional[float]
    has_thumb: bool


class PlaylistDetailResponse(CamelModel):
    id: str
    items: list[PlaylistItemResponse]


class PlaylistAddRequest(CamelModel):
    media_ids: list[str] = []


class PlaylistAddResponse(CamelModel):
    success: bool = True
    added: int


# --- Downloads & tags ---

class DownloadRequest(CamelModel):
    url: Optional[str] = None


class DownloadResponse(CamelModel):
    id: str
    url: str
    title: str
    status: str


class DownloadCreateResponse(CamelModel):
    success: bool = True
    download: DownloadResponse


class DownloadListResponse(CamelModel):
    items: list[DownloadResponse]


class TagListResponse(CamelModel):
    tags: list[str]
