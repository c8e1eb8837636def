"""Playlist endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from vaultsync.api.deps import get_playlist_store
from vaultsync.schemas.media import (
    PlaylistAddRequest,
    PlaylistAddResponse,
    PlaylistDetailResponse,
    PlaylistItemResponse,
    PlaylistListResponse,
    PlaylistResponse,
)
from vaultsync.services.collaborators import PlaylistStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/playlists", tags=["playlists"])


@router.get("", response_model=PlaylistListResponse)
def list_playlists(playlists: PlaylistStore = Depends(get_playlist_store)):
    return PlaylistListResponse(items=[
        PlaylistResponse(
            id=p.id,
            name=p.name,
            item_count=count,
            created_at=p.created_at,
            is_smart=p.is_smart,
        )
        for p, count in playlists.list_playlists()
    ])


@router.get("/{playlist_id}", response_model=PlaylistDetailResponse)
def get_playlist(playlist_id: str, playlists: PlaylistStore = Depends(get_playlist_store)):
    items = playlists.playlist_items(playlist_id)
    if items is None:
        raise HTTPException(status_code=404, detail="Playlist not found")
    return PlaylistDetailResponse(
        id=playlist_id,
        items=[
            PlaylistItemResponse(
                id=m.id,
                filename=m.filename,
                type=m.type,
                duration_sec=m.duration_sec,
                has_thumb=bool(m.thumb_path),
            )
            for m in items
        ],
    )


@router.post("/{playlist_id}/items", response_model=PlaylistAddResponse)
def add_playlist_items(
    playlist_id: str,
    request: PlaylistAddRequest,
    playlists: PlaylistStore = Depends(get_playlist_store),
):
    if not request.media_ids:
        raise HTTPException(status_code=400, detail="mediaIds array is required")

    added = playlists.add_playlist_items(playlist_id, request.media_ids)
    if added is None:
        raise HTTPException(status_code=404, detail="Playlist not found")
    logger.info("Added %d item(s) to playlist %s", added, playlist_id)
    return PlaylistAddResponse(added=added)
