"""Media file access: content types, byte ranges, thumbnail fallback."""

import logging
import re
from pathlib import Path

from vaultsync.models import Media
from vaultsync.services.collaborators import ThumbnailGenerator

logger = logging.getLogger(__name__)

MIME_TYPES = {
    ".mp4": "video/mp4",
    ".mkv": "video/x-matroska",
    ".avi": "video/x-msvideo",
    ".mov": "video/quicktime",
    ".webm": "video/webm",
    ".m4v": "video/x-m4v",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".bmp": "image/bmp",
    ".heic": "image/heic",
    ".avif": "image/avif",
}
DEFAULT_MIME_TYPE = "application/octet-stream"

CHUNK_SIZE = 1024 * 1024

_RANGE_RE = re.compile(r"^bytes=(\d*)-(\d*)$")


class RangeNotSatisfiable(ValueError):
    pass


def content_type_for(path: str | Path) -> str:
    return MIME_TYPES.get(Path(path).suffix.lower(), DEFAULT_MIME_TYPE)


def parse_range(header: str | None, size: int) -> tuple[int, int] | None:
    """Parse a single ``bytes=`` range into an inclusive (start, end) pair.

    Returns None when there is no usable Range header (serve the full body).
    Raises RangeNotSatisfiable when the range lies outside the file.
    """
    if not header:
        return None
    match = _RANGE_RE.match(header.strip())
    if not match:
        return None

    start_str, end_str = match.groups()
    if not start_str and not end_str:
        return None

    if not start_str:
        # Suffix range: the last N bytes
        length = int(end_str)
        if length == 0 or size == 0:
            raise RangeNotSatisfiable(header)
        return max(0, size - length), size - 1

    start = int(start_str)
    end = min(int(end_str), size - 1) if end_str else size - 1
    if start >= size or start > end:
        raise RangeNotSatisfiable(header)
    return start, end


def range_streamer(file_path: Path, start: int, end: int):
    with open(file_path, "rb") as f:
        f.seek(start)
        remaining = end - start + 1
        while remaining > 0:
            data = f.read(min(CHUNK_SIZE, remaining))
            if not data:
                break
            yield data
            remaining -= len(data)


def resolve_thumbnail(media: Media, generator: ThumbnailGenerator | None) -> tuple[Path, str] | None:
    """Find a thumbnail for a media item.

    Tries the stored thumbnail, then on-demand generation, then (for still
    images) the original file. Returns (path, content_type) or None.
    """
    if media.thumb_path and Path(media.thumb_path).exists():
        return Path(media.thumb_path), content_type_for(media.thumb_path)

    if generator is not None:
        try:
            generated = generator.generate(media)
        except Exception:
            logger.exception("Thumbnail generation failed for %s", media.id)
            generated = None
        if generated and Path(generated).exists():
            return Path(generated), content_type_for(generated)

    original = Path(media.path)
    if media.type == "image" and original.exists():
        return original, MIME_TYPES.get(original.suffix.lower(), "image/jpeg")

    return None
