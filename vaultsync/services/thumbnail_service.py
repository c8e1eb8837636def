"""On-demand thumbnail generation for library items."""

import logging
from pathlib import Path

from vaultsync.models import Media
from vaultsync.services.library_store import LibraryStore
from vaultsync.utils.image import generate_image_thumbnail, generate_video_thumbnail

logger = logging.getLogger(__name__)


class ThumbnailService:
    """Renders a thumbnail for a media item and records it in the store."""

    def __init__(self, store: LibraryStore, thumb_dir: Path, size: int = 400):
        self.store = store
        self.thumb_dir = thumb_dir
        self.size = size

    def generate(self, media: Media) -> Path | None:
        source = Path(media.path)
        if not source.exists():
            return None

        if media.type == "video":
            seek = min(1.0, (media.duration_sec or 0) / 2) if media.duration_sec else 1.0
            thumb_path = generate_video_thumbnail(source, self.thumb_dir, media.id, self.size, seek)
        else:
            thumb_path = generate_image_thumbnail(source, self.thumb_dir, media.id, self.size)

        if thumb_path:
            self.store.set_thumb_path(media.id, str(thumb_path))
            logger.info("Generated thumbnail for %s", media.id)
        return thumb_path
