"""CLI for probing clips before adding them to a library.

Usage:
    reelbuilder probe hook.mp4 body.mp4 --category body --thumbnails thumbs/
"""

import argparse
import json

from .clips import Category, ClipRegistry
from .common import format_duration
from .ingest import ingest_files


def main(args=None):
    parser = argparse.ArgumentParser(
        description="Extract duration and thumbnail from video files.",
    )
    parser.add_argument("files", nargs="+", help="Video files to probe")
    parser.add_argument(
        "--category", default="body",
        choices=[c.value for c in Category],
        help="Library the files would be uploaded into (default: body)",
    )
    parser.add_argument(
        "--thumbnails", default=None,
        help="Directory to write thumbnails into (none written if omitted)",
    )
    parser.add_argument(
        "--json", action="store_true",
        help="Print clip metadata as JSON",
    )
    parsed = parser.parse_args(args)

    registry = ClipRegistry()
    clips = ingest_files(registry, parsed.files, parsed.category, parsed.thumbnails)

    if parsed.json:
        print(json.dumps([
            {
                "id": c.id,
                "category": c.category.value,
                "name": c.name,
                "duration": c.duration,
                "media_ref": c.media_ref,
                "thumbnail_ref": c.thumbnail_ref,
            }
            for c in clips
        ], indent=2))
        return

    for c in clips:
        print(f"  {c.category.label:<5} {format_duration(c.duration)}  {c.name}")
        if c.thumbnail_ref:
            print(f"        thumbnail: {c.thumbnail_ref}")
    skipped = len(parsed.files) - len(clips)
    if skipped:
        print(f"Skipped {skipped} unusable file(s).")


if __name__ == "__main__":
    main()
