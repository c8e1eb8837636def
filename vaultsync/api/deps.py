"""Common API dependencies: server container, collaborators, current device."""

from fastapi import Depends, HTTPException, Request, status

from vaultsync.services.collaborators import (
    Collaborators,
    DownloadQueue,
    MarkerStore,
    MediaCatalog,
    MediaRecord,
    PlaylistStore,
    StatsStore,
    SyncStore,
)
from vaultsync.sync_server import SyncServer


def get_server(request: Request) -> SyncServer:
    return request.app.state.server


def get_collaborators(server: SyncServer = Depends(get_server)) -> Collaborators:
    return server.collaborators


def get_catalog(c: Collaborators = Depends(get_collaborators)) -> MediaCatalog:
    return c.require_catalog()


def get_stats_store(c: Collaborators = Depends(get_collaborators)) -> StatsStore:
    return c.require_stats()


def get_marker_store(c: Collaborators = Depends(get_collaborators)) -> MarkerStore:
    return c.require_markers()


def get_playlist_store(c: Collaborators = Depends(get_collaborators)) -> PlaylistStore:
    return c.require_playlists()


def get_download_queue(c: Collaborators = Depends(get_collaborators)) -> DownloadQueue:
    return c.require_downloads()


def get_sync_store(c: Collaborators = Depends(get_collaborators)) -> SyncStore:
    return c.require_sync()


def get_current_device_id(request: Request) -> str:
    """The device id resolved by the dispatcher for this request."""
    device_id = getattr(request.state, "device_id", None)
    if not device_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return device_id


def require_media(media_id: str, catalog: MediaCatalog) -> MediaRecord:
    record = catalog.get_media(media_id)
    if not record:
        raise HTTPException(status_code=404, detail="Media not found")
    return record
