"""Media streaming, thumbnails, ratings, views and markers."""

from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import FileResponse, Response, StreamingResponse

from vaultsync.api.deps import (
    get_catalog,
    get_collaborators,
    get_marker_store,
    get_stats_store,
    require_media,
)
from vaultsync.schemas.media import (
    MarkerCreateResponse,
    MarkerListResponse,
    MarkerRequest,
    MarkerResponse,
    RateRequest,
    RateResponse,
    StatsResponse,
    ViewResponse,
)
from vaultsync.services.collaborators import Collaborators, MarkerStore, MediaCatalog, StatsStore
from vaultsync.services.media_service import (
    RangeNotSatisfiable,
    content_type_for,
    parse_range,
    range_streamer,
    resolve_thumbnail,
)

router = APIRouter(prefix="/media", tags=["media"])

THUMB_CACHE_CONTROL = "public, max-age=86400"


@router.get("/{media_id}/stream")
def stream_media(
    media_id: str,
    request: Request,
    catalog: MediaCatalog = Depends(get_catalog),
):
    """Stream the original file, honoring single byte-range requests."""
    media = require_media(media_id, catalog).media
    file_path = Path(media.path)
    if not file_path.is_file():
        raise HTTPException(status_code=404, detail="File not found")

    size = file_path.stat().st_size
    content_type = content_type_for(file_path)

    try:
        byte_range = parse_range(request.headers.get("range"), size)
    except RangeNotSatisfiable:
        return Response(status_code=416, headers={"Content-Range": f"bytes */{size}"})

    if byte_range is None:
        return FileResponse(
            path=str(file_path),
            media_type=content_type,
            headers={"Accept-Ranges": "bytes"},
        )

    start, end = byte_range
    return StreamingResponse(
        range_streamer(file_path, start, end),
        status_code=206,
        media_type=content_type,
        headers={
            "Content-Range": f"bytes {start}-{end}/{size}",
            "Content-Length": str(end - start + 1),
            "Accept-Ranges": "bytes",
        },
    )


@router.get("/{media_id}/thumb")
def get_thumbnail(
    media_id: str,
    catalog: MediaCatalog = Depends(get_catalog),
    collaborators: Collaborators = Depends(get_collaborators),
):
    """Serve a thumbnail, generating one on demand if needed."""
    media = require_media(media_id, catalog).media
    found = resolve_thumbnail(media, collaborators.thumbnails)
    if not found:
        raise HTTPException(status_code=404, detail="Thumbnail not found")

    thumb_path, content_type = found
    return FileResponse(
        path=str(thumb_path),
        media_type=content_type,
        headers={"Cache-Control": THUMB_CACHE_CONTROL},
    )


# --- Ratings & stats ---

@router.post("/{media_id}/rate", response_model=RateResponse)
def rate_media(
    media_id: str,
    request: RateRequest,
    catalog: MediaCatalog = Depends(get_catalog),
    stats_store: StatsStore = Depends(get_stats_store),
):
    """Overwrite the rating (0-5) of a media item."""
    if request.rating is None or not 0 <= request.rating <= 5:
        raise HTTPException(status_code=400, detail="Rating must be a number between 0 and 5")
    require_media(media_id, catalog)

    stats = stats_store.set_rating(media_id, request.rating)
    return RateResponse(media_id=media_id, rating=stats.rating, views=stats.views)


@router.post("/{media_id}/view", response_model=ViewResponse)
def record_view(
    media_id: str,
    catalog: MediaCatalog = Depends(get_catalog),
    stats_store: StatsStore = Depends(get_stats_store),
):
    require_media(media_id, catalog)
    stats = stats_store.record_view(media_id)
    return ViewResponse(media_id=media_id, views=stats.views, last_viewed_at=stats.last_viewed_at)


@router.get("/{media_id}/stats", response_model=StatsResponse)
def get_media_stats(
    media_id: str,
    catalog: MediaCatalog = Depends(get_catalog),
    stats_store: StatsStore = Depends(get_stats_store),
):
    require_media(media_id, catalog)
    stats = stats_store.get_stats(media_id)
    if not stats:
        return StatsResponse(media_id=media_id)
    return StatsResponse(
        media_id=media_id,
        rating=stats.rating,
        views=stats.views,
        o_count=stats.o_count,
        last_viewed_at=stats.last_viewed_at,
    )


# --- Markers ---

def _marker_to_response(m) -> MarkerResponse:
    return MarkerResponse(
        id=m.id,
        media_id=m.media_id,
        time_sec=m.time_sec,
        title=m.title,
        created_at=m.created_at,
    )


@router.get("/{media_id}/markers", response_model=MarkerListResponse)
def list_markers(
    media_id: str,
    catalog: MediaCatalog = Depends(get_catalog),
    marker_store: MarkerStore = Depends(get_marker_store),
):
    require_media(media_id, catalog)
    markers = marker_store.list_markers(media_id)
    return MarkerListResponse(media_id=media_id, markers=[_marker_to_response(m) for m in markers])


@router.post("/{media_id}/markers", response_model=MarkerCreateResponse)
def add_marker(
    media_id: str,
    request: MarkerRequest,
    catalog: MediaCatalog = Depends(get_catalog),
    marker_store: MarkerStore = Depends(get_marker_store),
):
    """Add a bookmark. Markers are never deduplicated."""
    if request.time_sec is None or request.time_sec < 0:
        raise HTTPException(status_code=400, detail="timeSec must be a positive number")
    require_media(media_id, catalog)

    marker = marker_store.add_marker(media_id, request.time_sec, request.title or "")
    return MarkerCreateResponse(marker=_marker_to_response(marker))
