"""URL download queue endpoints."""

from urllib.parse import urlparse

from fastapi import APIRouter, Depends, HTTPException

from vaultsync.api.deps import get_download_queue
from vaultsync.schemas.media import (
    DownloadCreateResponse,
    DownloadListResponse,
    DownloadRequest,
    DownloadResponse,
)
from vaultsync.services.collaborators import DownloadQueue

router = APIRouter(tags=["downloads"])


def _download_to_response(item) -> DownloadResponse:
    return DownloadResponse(id=item.id, url=item.url, title=item.title, status=item.status)


@router.post("/download", response_model=DownloadCreateResponse)
def add_download(request: DownloadRequest, queue: DownloadQueue = Depends(get_download_queue)):
    """Queue a URL for download on the desktop."""
    url = (request.url or "").strip()
    if not url:
        raise HTTPException(status_code=400, detail="URL is required")

    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise HTTPException(status_code=400, detail="Invalid URL format")

    item = queue.add_download(url, source="mobile")
    return DownloadCreateResponse(download=_download_to_response(item))


@router.get("/downloads", response_model=DownloadListResponse)
def list_downloads(queue: DownloadQueue = Depends(get_download_queue)):
    return DownloadListResponse(items=[_download_to_response(d) for d in queue.list_downloads()])
