"""Playlist and download queue models."""

import secrets
from typing import Optional

from sqlmodel import Field, SQLModel

from vaultsync.utils.timestamps import now_ms


class Playlist(SQLModel, table=True):
    __tablename__ = "playlists"

    id: str = Field(default_factory=lambda: f"pls_{secrets.token_hex(4)}", primary_key=True)
    name: str
    is_smart: bool = Field(default=False)
    created_at: int = Field(default_factory=now_ms)


class PlaylistItem(SQLModel, table=True):
    __tablename__ = "playlist_items"

    id: Optional[int] = Field(default=None, primary_key=True)
    playlist_id: str = Field(foreign_key="playlists.id", index=True)
    media_id: str = Field(foreign_key="media.id")
    position: int = 0
    added_at: int = Field(default_factory=now_ms)


class DownloadItem(SQLModel, table=True):
    __tablename__ = "downloads"

    id: str = Field(default_factory=lambda: f"dl_{secrets.token_hex(4)}", primary_key=True)
    url: str
    title: str
    status: str = Field(default="queued")  # queued | downloading | completed | failed
    source: str = Field(default="mobile")  # 'desktop' | 'mobile'
    created_at: int = Field(default_factory=now_ms)
