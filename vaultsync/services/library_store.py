"""SQLite-backed media library store.

Implements every collaborator protocol the sync server depends on: catalog
listing, stats and ratings, markers, playlists, the download queue and the
favorites/watch-history sync contract.

Sync contract:
- Favorites are last-write-wins per media id, ordered by the client's
  timestamp. Unfavorites are kept as tombstones so a stale push cannot
  resurrect them. Replaying a batch applies nothing the second time.
- Pushed watch events are deduplicated: an event is dropped when the store
  already has an event for the same media within ``dedup_window_ms`` of its
  ``viewed_at``. Accepted events bump ``views`` and move ``last_viewed_at``
  forward (never backward).
- Every read-then-write path runs under one store-wide lock, so a retry that
  overlaps the original request sees its writes.
"""

import logging
import threading
from pathlib import Path
from urllib.parse import unquote, urlparse

from sqlalchemy.engine import Engine
from sqlmodel import Session, col, func, or_, select

from vaultsync.models import (
    DownloadItem,
    Favorite,
    Marker,
    Media,
    MediaStats,
    MediaTag,
    Playlist,
    PlaylistItem,
    Tag,
    WatchEvent,
)
from vaultsync.services.collaborators import LibraryQuery, MediaRecord
from vaultsync.utils.timestamps import now_ms

logger = logging.getLogger(__name__)

# Formats the iOS/Android players can handle natively
MOBILE_EXTENSIONS = (
    ".mp4", ".mov", ".m4v", ".mkv", ".avi", ".webm",
    ".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp", ".heic", ".heics", ".avif",
)

VIDEO_EXTENSIONS = {".mp4", ".mov", ".m4v", ".mkv", ".avi", ".webm"}

SORT_ORDERS = {
    "newest": [col(Media.added_at).desc()],
    "oldest": [col(Media.added_at).asc()],
    "name": [col(Media.filename).asc()],
    "size": [col(Media.size_bytes).desc()],
    "duration": [col(Media.duration_sec).is_(None), col(Media.duration_sec).desc()],
    "random": [func.random()],
}


def _guess_type(path: Path) -> str:
    ext = path.suffix.lower()
    if ext == ".gif":
        return "gif"
    if ext in VIDEO_EXTENSIONS:
        return "video"
    return "image"


def _escape_like(text: str) -> str:
    """Make % and _ match literally in a LIKE pattern."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class LibraryStore:
    def __init__(self, engine: Engine, dedup_window_ms: int = 1000):
        self.engine = engine
        self.dedup_window_ms = dedup_window_ms
        # Serializes read-then-write paths (stats rows, favorites, dedup check)
        self._write_lock = threading.Lock()

    # --- Library management ---

    def add_media(
        self,
        path: str | Path,
        type: str | None = None,
        duration_sec: float | None = None,
        width: int | None = None,
        height: int | None = None,
        added_at: int | None = None,
        thumb_path: str | None = None,
        tags: list[str] | None = None,
    ) -> Media:
        """Register a file in the library (scanning itself happens elsewhere)."""
        path = Path(path)
        media = Media(
            path=str(path),
            filename=path.name,
            type=type or _guess_type(path),
            duration_sec=duration_sec,
            size_bytes=path.stat().st_size if path.exists() else 0,
            width=width,
            height=height,
            thumb_path=thumb_path,
        )
        if added_at is not None:
            media.added_at = added_at

        with Session(self.engine) as session:
            session.add(media)
            session.flush()
            for name in tags or []:
                self._link_tag(session, media.id, name)
            session.commit()
            session.refresh(media)
        return media

    def tag_media(self, media_id: str, tag_name: str) -> None:
        with Session(self.engine) as session:
            self._link_tag(session, media_id, tag_name)
            session.commit()

    def _link_tag(self, session: Session, media_id: str, tag_name: str) -> None:
        name = tag_name.strip()
        if not name:
            return
        tag = session.exec(select(Tag).where(Tag.name == name)).first()
        if not tag:
            tag = Tag(name=name)
            session.add(tag)
            session.flush()
        if not session.get(MediaTag, (media_id, tag.id)):
            session.add(MediaTag(media_id=media_id, tag_id=tag.id))

    def set_thumb_path(self, media_id: str, thumb_path: str) -> None:
        with Session(self.engine) as session:
            media = session.get(Media, media_id)
            if media:
                media.thumb_path = thumb_path
                session.add(media)
                session.commit()

    def create_playlist(self, name: str, is_smart: bool = False) -> Playlist:
        with Session(self.engine) as session:
            playlist = Playlist(name=name, is_smart=is_smart)
            session.add(playlist)
            session.commit()
            session.refresh(playlist)
            return playlist

    # --- MediaCatalog ---

    def _filtered(self, query: LibraryQuery):
        stmt = select(Media).where(
            or_(*[func.lower(Media.filename).like(f"%{ext}") for ext in MOBILE_EXTENSIONS])
        )
        if query.type:
            stmt = stmt.where(Media.type == query.type)
        if query.search:
            pattern = f"%{_escape_like(query.search)}%"
            stmt = stmt.where(col(Media.filename).ilike(pattern, escape="\\"))
        for tag_name in query.tags or []:
            tagged = (
                select(MediaTag.media_id)
                .join(Tag, col(Tag.id) == col(MediaTag.tag_id))
                .where(Tag.name == tag_name)
            )
            stmt = stmt.where(col(Media.id).in_(tagged))
        return stmt

    def list_media(self, query: LibraryQuery) -> list[MediaRecord]:
        stmt = self._filtered(query)
        stmt = stmt.order_by(*SORT_ORDERS.get(query.sort, SORT_ORDERS["newest"]))
        stmt = stmt.offset(query.offset).limit(query.limit)

        with Session(self.engine) as session:
            rows = list(session.exec(stmt).all())
            return self._to_records(session, rows)

    def count_media(self, query: LibraryQuery | None = None) -> int:
        stmt = self._filtered(query or LibraryQuery())
        with Session(self.engine) as session:
            return session.exec(select(func.count()).select_from(stmt.subquery())).one()

    def get_media(self, media_id: str) -> MediaRecord | None:
        with Session(self.engine) as session:
            media = session.get(Media, media_id)
            if not media:
                return None
            return self._to_records(session, [media])[0]

    def list_tags(self) -> list[str]:
        with Session(self.engine) as session:
            return list(session.exec(select(Tag.name).order_by(Tag.name)).all())

    def _to_records(self, session: Session, rows: list[Media]) -> list[MediaRecord]:
        """Attach stats and tag names to a batch of media rows."""
        ids = [m.id for m in rows]
        if not ids:
            return []

        stats = {
            s.media_id: s
            for s in session.exec(select(MediaStats).where(col(MediaStats.media_id).in_(ids))).all()
        }
        tags: dict[str, list[str]] = {}
        tag_rows = session.exec(
            select(MediaTag.media_id, Tag.name)
            .join(Tag, col(Tag.id) == col(MediaTag.tag_id))
            .where(col(MediaTag.media_id).in_(ids))
            .order_by(Tag.name)
        ).all()
        for media_id, name in tag_rows:
            tags.setdefault(media_id, []).append(name)

        records = []
        for m in rows:
            s = stats.get(m.id)
            records.append(MediaRecord(
                media=m,
                rating=s.rating if s else 0,
                view_count=s.views if s else 0,
                tags=tags.get(m.id, []),
            ))
        return records

    # --- StatsStore ---

    def _stats_for(self, session: Session, media_id: str) -> MediaStats:
        stats = session.get(MediaStats, media_id)
        if not stats:
            stats = MediaStats(media_id=media_id)
            session.add(stats)
        return stats

    def set_rating(self, media_id: str, rating: int) -> MediaStats:
        with self._write_lock, Session(self.engine) as session:
            stats = self._stats_for(session, media_id)
            stats.rating = max(0, min(5, int(round(rating))))
            stats.updated_at = now_ms()
            session.add(stats)
            session.commit()
            session.refresh(stats)
            return stats

    def record_view(self, media_id: str, viewed_at: int | None = None) -> MediaStats:
        """Record a single live view. Always additive, never deduplicated."""
        viewed_at = viewed_at or now_ms()
        with self._write_lock, Session(self.engine) as session:
            stats = self._add_view(session, media_id, viewed_at, source="mobile")
            session.commit()
            session.refresh(stats)
            return stats

    def get_stats(self, media_id: str) -> MediaStats | None:
        with Session(self.engine) as session:
            return session.get(MediaStats, media_id)

    def all_ratings(self) -> list[MediaStats]:
        with Session(self.engine) as session:
            return list(session.exec(
                select(MediaStats)
                .where(or_(MediaStats.rating > 0, MediaStats.views > 0))
                .order_by(col(MediaStats.rating).desc(), col(MediaStats.views).desc())
            ).all())

    def bulk_record_views(self, views: list[dict]) -> int:
        """Apply pushed views; entries without a viewed_at count as 'now'."""
        now = now_ms()
        return self.sync_watch_history([
            {"media_id": v["media_id"], "viewed_at": v.get("viewed_at") or now}
            for v in views
        ])

    def _add_view(self, session: Session, media_id: str, viewed_at: int, source: str) -> MediaStats:
        session.add(WatchEvent(media_id=media_id, viewed_at=viewed_at, source=source))
        stats = self._stats_for(session, media_id)
        stats.views += 1
        stats.last_viewed_at = max(stats.last_viewed_at or 0, viewed_at)
        stats.updated_at = now_ms()
        session.add(stats)
        return stats

    def _is_duplicate_view(self, session: Session, media_id: str, viewed_at: int) -> bool:
        window = self.dedup_window_ms
        existing = session.exec(
            select(WatchEvent.id).where(
                WatchEvent.media_id == media_id,
                col(WatchEvent.viewed_at) >= viewed_at - window,
                col(WatchEvent.viewed_at) <= viewed_at + window,
            )
        ).first()
        return existing is not None

    # --- MarkerStore ---

    def list_markers(self, media_id: str) -> list[Marker]:
        with Session(self.engine) as session:
            return list(session.exec(
                select(Marker).where(Marker.media_id == media_id).order_by(Marker.time_sec)
            ).all())

    def add_marker(self, media_id: str, time_sec: float, title: str) -> Marker:
        marker = Marker(
            media_id=media_id,
            time_sec=time_sec,
            title=title.strip() or f"Marker @ {time_sec:.1f}s",
        )
        with Session(self.engine) as session:
            session.add(marker)
            session.commit()
            session.refresh(marker)
            return marker

    # --- PlaylistStore ---

    def list_playlists(self) -> list[tuple[Playlist, int]]:
        with Session(self.engine) as session:
            counts = dict(session.exec(
                select(PlaylistItem.playlist_id, func.count()).group_by(PlaylistItem.playlist_id)
            ).all())
            playlists = session.exec(select(Playlist).order_by(col(Playlist.created_at).desc())).all()
            return [(p, counts.get(p.id, 0)) for p in playlists]

    def playlist_items(self, playlist_id: str) -> list[Media] | None:
        with Session(self.engine) as session:
            if not session.get(Playlist, playlist_id):
                return None
            return list(session.exec(
                select(Media)
                .join(PlaylistItem, col(PlaylistItem.media_id) == col(Media.id))
                .where(PlaylistItem.playlist_id == playlist_id)
                .order_by(PlaylistItem.position)
            ).all())

    def add_playlist_items(self, playlist_id: str, media_ids: list[str]) -> int | None:
        """Append media to a playlist. Returns the number added, None if no such playlist."""
        with self._write_lock, Session(self.engine) as session:
            if not session.get(Playlist, playlist_id):
                return None
            position = session.exec(
                select(func.coalesce(func.max(PlaylistItem.position), -1))
                .where(PlaylistItem.playlist_id == playlist_id)
            ).one()
            added = 0
            for media_id in media_ids:
                if not session.get(Media, media_id):
                    continue
                position += 1
                session.add(PlaylistItem(playlist_id=playlist_id, media_id=media_id, position=position))
                added += 1
            session.commit()
            return added

    # --- DownloadQueue ---

    def add_download(self, url: str, source: str = "mobile") -> DownloadItem:
        parsed = urlparse(url)
        title = unquote(parsed.path.rstrip("/").rsplit("/", 1)[-1]) or parsed.netloc
        item = DownloadItem(url=url, title=title, source=source)
        with Session(self.engine) as session:
            session.add(item)
            session.commit()
            session.refresh(item)
        logger.info("Download queued from %s: %s", source, url)
        return item

    def list_downloads(self) -> list[DownloadItem]:
        with Session(self.engine) as session:
            return list(session.exec(
                select(DownloadItem).order_by(col(DownloadItem.created_at).desc())
            ).all())

    # --- SyncStore ---

    def get_favorites(self) -> list[dict]:
        with Session(self.engine) as session:
            rows = session.exec(
                select(Favorite, MediaStats.rating)
                .join(MediaStats, col(MediaStats.media_id) == col(Favorite.media_id), isouter=True)
                .where(Favorite.is_favorite == True)  # noqa: E712
                .order_by(col(Favorite.updated_at).desc())
            ).all()
            return [
                {
                    "media_id": fav.media_id,
                    "is_favorite": True,
                    "rating": rating or 0,
                    "timestamp": fav.updated_at,
                }
                for fav, rating in rows
            ]

    def sync_favorites(self, items: list[dict]) -> int:
        """Apply pushed favorite toggles. Returns how many changed stored state."""
        received_at = now_ms()
        applied = 0
        with self._write_lock, Session(self.engine) as session:
            for item in items:
                media_id = item["media_id"]
                is_favorite = bool(item["is_favorite"])
                timestamp = item.get("timestamp") or received_at
                if not session.get(Media, media_id):
                    continue

                fav = session.get(Favorite, media_id)
                if fav is None:
                    fav = Favorite(media_id=media_id, is_favorite=is_favorite, updated_at=timestamp)
                elif timestamp < fav.updated_at:
                    continue  # stale
                elif timestamp == fav.updated_at and fav.is_favorite == is_favorite:
                    continue  # replay
                else:
                    fav.is_favorite = is_favorite
                    fav.updated_at = timestamp
                fav.received_at = received_at
                session.add(fav)
                session.flush()
                applied += 1
            session.commit()
        return applied

    def get_watch_history(self, since: int | None = None) -> list[dict]:
        stmt = select(MediaStats).where(col(MediaStats.last_viewed_at).is_not(None))
        if since is not None:
            stmt = stmt.where(col(MediaStats.last_viewed_at) >= since)
        stmt = stmt.order_by(col(MediaStats.last_viewed_at).desc())
        with Session(self.engine) as session:
            return [
                {"media_id": s.media_id, "views": s.views, "last_viewed_at": s.last_viewed_at}
                for s in session.exec(stmt).all()
            ]

    def sync_watch_history(self, items: list[dict]) -> int:
        """Apply pushed watch events, skipping unknown media and near-duplicates."""
        applied = 0
        with self._write_lock, Session(self.engine) as session:
            for item in items:
                media_id = item["media_id"]
                viewed_at = item["viewed_at"]
                if not session.get(Media, media_id):
                    continue
                if self._is_duplicate_view(session, media_id, viewed_at):
                    continue
                self._add_view(session, media_id, viewed_at, source="mobile")
                session.flush()
                applied += 1
            session.commit()
        return applied

    def get_sync_state(self) -> dict:
        with Session(self.engine) as session:
            last_watch = session.exec(
                select(func.max(WatchEvent.received_at)).where(WatchEvent.source == "mobile")
            ).one()
            last_fav = session.exec(select(func.max(Favorite.received_at))).one()
            favorites_count = session.exec(
                select(func.count()).select_from(Favorite).where(Favorite.is_favorite == True)  # noqa: E712
            ).one()
        return {
            "last_sync": max(last_watch or 0, last_fav or 0),
            "media_count": self.count_media(),
            "favorites_count": favorites_count,
        }
