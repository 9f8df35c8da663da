"""Media ingestion -- duration and thumbnail extraction for uploaded clips.

Each uploaded file is opened with moviepy, its duration read from the
container, and a still frame grabbed at min(1s, duration/2) and written as
a JPEG next to the other thumbnails. The extracted metadata is then
registered in the clip registry under the category of the library the file
was uploaded into.
"""

import logging
import mimetypes
import uuid
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from PIL import Image
from moviepy import VideoFileClip

from .clips import Category, Clip, ClipRegistry
from .errors import MetadataExtractionFailed, UnsupportedMediaType

logger = logging.getLogger(__name__)

THUMBNAIL_TIME = 1.0
THUMBNAIL_QUALITY = 80


@dataclass(frozen=True)
class MediaInfo:
    name: str
    duration: float
    media_ref: str
    thumbnail_ref: str | None = None


def check_media_type(path: str | Path) -> str:
    """Return the file's video/* MIME type or raise UnsupportedMediaType."""
    mime, _ = mimetypes.guess_type(str(path))
    if mime is None or not mime.startswith("video/"):
        raise UnsupportedMediaType(f"Not a video file: {Path(path).name} ({mime or 'unknown type'})")
    return mime


def write_thumbnail(frame, output: str | Path) -> Path:
    """Save an RGB frame array as a JPEG."""
    output = Path(output)
    output.parent.mkdir(parents=True, exist_ok=True)
    img = Image.fromarray(np.asarray(frame, dtype=np.uint8)).convert("RGB")
    img.save(output, format="JPEG", quality=THUMBNAIL_QUALITY)
    return output


def extract_media_info(
    path: str | Path,
    thumbnail_dir: str | Path | None = None,
) -> MediaInfo:
    """Probe a video file for its duration and, optionally, a thumbnail.

    Args:
        path: Video file to probe.
        thumbnail_dir: Where to write the thumbnail JPEG. No thumbnail is
            made when None.

    Raises:
        UnsupportedMediaType: The file is not a video.
        MetadataExtractionFailed: The file could not be decoded.
    """
    path = Path(path)
    check_media_type(path)
    if not path.exists():
        raise MetadataExtractionFailed(f"Video file not found: {path}")

    try:
        with VideoFileClip(str(path)) as clip:
            duration = clip.duration
            if duration is None or duration < 0:
                raise MetadataExtractionFailed(f"No usable duration in {path.name}")

            thumbnail_ref = None
            if thumbnail_dir is not None:
                t = min(THUMBNAIL_TIME, duration / 2)
                thumb = Path(thumbnail_dir) / f"{path.stem}-{uuid.uuid4().hex[:8]}.jpg"
                thumbnail_ref = str(write_thumbnail(clip.get_frame(t), thumb))
    except MetadataExtractionFailed:
        raise
    except (OSError, KeyError, ValueError, IndexError) as e:
        raise MetadataExtractionFailed(f"Could not read {path.name}: {e}") from e

    return MediaInfo(
        name=path.name,
        duration=float(duration),
        media_ref=str(path.resolve()),
        thumbnail_ref=thumbnail_ref,
    )


def ingest_file(
    registry: ClipRegistry,
    path: str | Path,
    category: Category | str,
    thumbnail_dir: str | Path | None = None,
    name: str | None = None,
) -> Clip:
    """Extract metadata from `path` and register it under `category`."""
    info = extract_media_info(path, thumbnail_dir)
    return registry.ingest(
        category,
        name or info.name,
        info.duration,
        info.media_ref,
        info.thumbnail_ref,
    )


def ingest_files(
    registry: ClipRegistry,
    paths: list[str | Path],
    category: Category | str,
    thumbnail_dir: str | Path | None = None,
) -> list[Clip]:
    """Ingest a batch of uploads into one library.

    Files that are not videos or cannot be decoded are logged and skipped;
    the rest are still ingested.
    """
    clips = []
    for path in paths:
        try:
            clips.append(ingest_file(registry, path, category, thumbnail_dir))
        except (UnsupportedMediaType, MetadataExtractionFailed) as e:
            logger.warning("Skipping %s: %s", path, e)
    return clips
