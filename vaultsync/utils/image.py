"""Image processing: still and video thumbnails."""

import subprocess
from pathlib import Path

from PIL import Image, ImageOps


def generate_image_thumbnail(
    source: Path,
    thumb_dir: Path,
    media_id: str,
    size: int = 400,
) -> Path:
    """Render a JPEG thumbnail of an image (first frame for GIFs).

    Returns the path of the written thumbnail.
    """
    thumb_dir.mkdir(parents=True, exist_ok=True)
    out_path = thumb_dir / f"{media_id}.jpg"

    with Image.open(source) as img:
        img.seek(0)
        # Auto-rotate based on EXIF orientation
        thumb = ImageOps.exif_transpose(img)
        thumb.thumbnail((size, size), Image.LANCZOS)

        # Convert to RGB if needed (RGBA, P, etc.)
        if thumb.mode not in ("RGB", "L"):
            thumb = thumb.convert("RGB")

        thumb.save(out_path, "JPEG", quality=82)

    return out_path


def generate_video_thumbnail(
    video_path: Path,
    thumb_dir: Path,
    media_id: str,
    size: int = 400,
    seek_seconds: float = 1.0,
) -> Path | None:
    """Grab a single frame from a video using FFmpeg.

    Returns the thumbnail path, or None if FFmpeg is unavailable or failed.
    """
    thumb_dir.mkdir(parents=True, exist_ok=True)
    out_path = thumb_dir / f"{media_id}.jpg"

    try:
        subprocess.run(
            [
                "ffmpeg", "-ss", f"{seek_seconds:.2f}", "-i", str(video_path),
                "-vframes", "1",
                "-vf", f"scale={size}:-1",
                "-y", str(out_path),
            ],
            capture_output=True,
            timeout=30,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return None  # FFmpeg not installed or timeout

    if out_path.exists() and out_path.stat().st_size > 0:
        return out_path
    return None
