"""Library listing and detail endpoints.

Responses are projections: filesystem paths never leave the server.
"""

from fastapi import APIRouter, Depends, Query

from vaultsync.api.deps import get_catalog, get_server, require_media
from vaultsync.schemas.media import LibraryResponse, MediaItemResponse, TagListResponse
from vaultsync.services.collaborators import LibraryQuery, MediaCatalog, MediaRecord
from vaultsync.sync_server import SyncServer

router = APIRouter(tags=["library"])


def media_to_response(record: MediaRecord) -> MediaItemResponse:
    m = record.media
    return MediaItemResponse(
        id=m.id,
        filename=m.filename,
        type=m.type,
        duration_sec=m.duration_sec,
        size_bytes=m.size_bytes,
        width=m.width,
        height=m.height,
        added_at=m.added_at,
        rating=record.rating,
        view_count=record.view_count,
        tags=record.tags or [],
        has_thumb=bool(m.thumb_path),
    )


@router.get("/library", response_model=LibraryResponse)
def list_library(
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1),
    type: str | None = Query(default=None),
    tags: str | None = Query(default=None),
    search: str | None = Query(default=None),
    sort: str = Query(default="newest"),
    catalog: MediaCatalog = Depends(get_catalog),
    server: SyncServer = Depends(get_server),
):
    """List library items, newest first by default."""
    limit = min(limit or server.settings.library_page_limit, server.settings.library_max_limit)
    query = LibraryQuery(
        type=type or None,
        tags=[t for t in (tags or "").split(",") if t] or None,
        search=search or None,
        sort=sort,
        limit=limit,
        offset=(page - 1) * limit,
    )
    items = [media_to_response(r) for r in catalog.list_media(query)]
    return LibraryResponse(
        items=items,
        page=page,
        limit=limit,
        has_more=len(items) == limit,
        total_count=catalog.count_media(query),
    )


@router.get("/library/{media_id}", response_model=MediaItemResponse)
def get_library_item(media_id: str, catalog: MediaCatalog = Depends(get_catalog)):
    return media_to_response(require_media(media_id, catalog))


@router.get("/tags", response_model=TagListResponse)
def list_tags(catalog: MediaCatalog = Depends(get_catalog)):
    return TagListResponse(tags=catalog.list_tags())
