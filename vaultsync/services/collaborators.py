"""Capability interfaces for the media library the server exposes.

The server core only depends on these protocols. ``LibraryStore`` implements
all of them; tests and embedders may wire in any subset. A collaborator that
was never wired in surfaces as ``NotConfigured`` when a handler needs it.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from vaultsync.models import DownloadItem, Marker, Media, MediaStats, Playlist
from vaultsync.services.errors import NotConfigured


@dataclass
class LibraryQuery:
    type: str | None = None
    tags: list[str] | None = None
    search: str | None = None
    sort: str = "newest"
    limit: int = 50
    offset: int = 0


@dataclass
class MediaRecord:
    """A media row joined with its stats and tags."""
    media: Media
    rating: int = 0
    view_count: int = 0
    tags: list[str] | None = None


class MediaCatalog(Protocol):
    def list_media(self, query: LibraryQuery) -> list[MediaRecord]: ...
    def count_media(self, query: LibraryQuery | None = None) -> int: ...
    def get_media(self, media_id: str) -> MediaRecord | None: ...
    def list_tags(self) -> list[str]: ...


class StatsStore(Protocol):
    def set_rating(self, media_id: str, rating: int) -> MediaStats: ...
    def record_view(self, media_id: str, viewed_at: int | None = None) -> MediaStats: ...
    def get_stats(self, media_id: str) -> MediaStats | None: ...
    def all_ratings(self) -> list[MediaStats]: ...
    def bulk_record_views(self, views: list[dict]) -> int: ...


class MarkerStore(Protocol):
    def list_markers(self, media_id: str) -> list[Marker]: ...
    def add_marker(self, media_id: str, time_sec: float, title: str) -> Marker: ...


class PlaylistStore(Protocol):
    def list_playlists(self) -> list[tuple[Playlist, int]]: ...
    def playlist_items(self, playlist_id: str) -> list[Media] | None: ...
    def add_playlist_items(self, playlist_id: str, media_ids: list[str]) -> int: ...


class DownloadQueue(Protocol):
    def add_download(self, url: str, source: str = "mobile") -> DownloadItem: ...
    def list_downloads(self) -> list[DownloadItem]: ...


class SyncStore(Protocol):
    def get_favorites(self) -> list[dict]: ...
    def sync_favorites(self, items: list[dict]) -> int: ...
    def get_watch_history(self, since: int | None = None) -> list[dict]: ...
    def sync_watch_history(self, items: list[dict]) -> int: ...
    def get_sync_state(self) -> dict: ...


class ThumbnailGenerator(Protocol):
    def generate(self, media: Media) -> Path | None: ...


@dataclass
class Collaborators:
    catalog: MediaCatalog | None = None
    stats: StatsStore | None = None
    markers: MarkerStore | None = None
    playlists: PlaylistStore | None = None
    downloads: DownloadQueue | None = None
    sync: SyncStore | None = None
    thumbnails: ThumbnailGenerator | None = None

    @classmethod
    def from_store(cls, store, thumbnails: ThumbnailGenerator | None = None) -> "Collaborators":
        """Wire a single store that implements every protocol."""
        return cls(
            catalog=store,
            stats=store,
            markers=store,
            playlists=store,
            downloads=store,
            sync=store,
            thumbnails=thumbnails,
        )

    def require_catalog(self) -> MediaCatalog:
        if self.catalog is None:
            raise NotConfigured("Media")
        return self.catalog

    def require_stats(self) -> StatsStore:
        if self.stats is None:
            raise NotConfigured("Stats")
        return self.stats

    def require_markers(self) -> MarkerStore:
        if self.markers is None:
            raise NotConfigured("Markers")
        return self.markers

    def require_playlists(self) -> PlaylistStore:
        if self.playlists is None:
            raise NotConfigured("Playlist")
        return self.playlists

    def require_downloads(self) -> DownloadQueue:
        if self.downloads is None:
            raise NotConfigured("Download")
        return self.downloads

    def require_sync(self) -> SyncStore:
        if self.sync is None:
            raise NotConfigured("Sync")
        return self.sync
