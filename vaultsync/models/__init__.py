"""Vault Sync models."""

from vaultsync.models.device import PairedDevice
from vaultsync.models.media import Favorite, Marker, Media, MediaStats, MediaTag, Tag, WatchEvent
from vaultsync.models.playlist import DownloadItem, Playlist, PlaylistItem

__all__ = [
    "PairedDevice",
    "Media",
    "Tag",
    "MediaTag",
    "MediaStats",
    "WatchEvent",
    "Favorite",
    "Marker",
    "Playlist",
    "PlaylistItem",
    "DownloadItem",
]
