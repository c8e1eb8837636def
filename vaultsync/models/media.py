"""Media library models (reference library store)."""

import secrets
from typing import Optional

from sqlmodel import Field, SQLModel

from vaultsync.utils.timestamps import now_ms


class Media(SQLModel, table=True):
    __tablename__ = "media"

    id: str = Field(default_factory=lambda: f"med_{secrets.token_hex(6)}", primary_key=True)
    path: str = Field(unique=True)
    filename: str = Field(index=True)
    type: str  # 'video' | 'image' | 'gif'
    duration_sec: Optional[float] = None
    size_bytes: int = 0
    width: Optional[int] = None
    height: Optional[int] = None
    thumb_path: Optional[str] = None
    added_at: int = Field(default_factory=now_ms, index=True)


class Tag(SQLModel, table=True):
    __tablename__ = "tags"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(unique=True, index=True)


class MediaTag(SQLModel, table=True):
    __tablename__ = "media_tags"

    media_id: str = Field(foreign_key="media.id", primary_key=True)
    tag_id: int = Field(foreign_key="tags.id", primary_key=True)


class MediaStats(SQLModel, table=True):
    __tablename__ = "media_stats"

    media_id: str = Field(foreign_key="media.id", primary_key=True)
    views: int = Field(default=0)
    last_viewed_at: Optional[int] = Field(default=None, index=True)
    rating: int = Field(default=0)  # 0..5
    o_count: int = Field(default=0)
    updated_at: int = Field(default_factory=now_ms)


class WatchEvent(SQLModel, table=True):
    __tablename__ = "watch_events"

    id: Optional[int] = Field(default=None, primary_key=True)
    media_id: str = Field(foreign_key="media.id", index=True)
    viewed_at: int = Field(index=True)
    source: str = Field(default="desktop")  # 'desktop' | 'mobile'
    received_at: int = Field(default_factory=now_ms)


class Favorite(SQLModel, table=True):
    __tablename__ = "favorites"

    media_id: str = Field(foreign_key="media.id", primary_key=True)
    is_favorite: bool = Field(default=True)  # False rows are tombstones
    updated_at: int = Field(default_factory=now_ms)  # client timestamp of the last change
    received_at: Optional[int] = None  # set when the change arrived from a device


class Marker(SQLModel, table=True):
    __tablename__ = "markers"

    id: str = Field(default_factory=lambda: f"mrk_{secrets.token_hex(6)}", primary_key=True)
    media_id: str = Field(foreign_key="media.id", index=True)
    time_sec: float
    title: str
    created_at: int = Field(default_factory=now_ms)
