#!/usr/bin/env python3
"""Generate synthetic Hook/Body/CTA clips and a session manifest for a demo.

Creates five labelled clips in examples/demo-clips/ and writes
examples/demo-session.yaml referencing them. Each clip is a solid color
with its category and id drawn in the middle, so the merged reel shows the
timeline order at a glance.

Usage:
    python examples/generate_demo_clips.py
    # Then build:
    reelbuilder build --manifest examples/demo-session.yaml \
        --output examples/demo-renders/reel.mp4
"""

import numpy as np
import yaml
from moviepy import ImageClip
from pathlib import Path
from PIL import Image, ImageDraw, ImageFont

HERE = Path(__file__).resolve().parent
OUTPUT_DIR = HERE / "demo-clips"
SIZE = (360, 640)  # vertical, like the default output
FPS = 30

# (category, id, color, duration)
CLIPS = [
    ("hook", "h1", (180, 60, 60),  2.0),  # red
    ("hook", "h2", (200, 130, 40), 1.5),  # orange
    ("body", "b1", (60, 60, 180),  3.0),  # blue
    ("body", "b2", (60, 160, 60),  2.5),  # green
    ("cta",  "c1", (130, 60, 180), 2.0),  # purple
]

TIMELINE = ["h1", "b1", "b2", "c1"]


def _make_frame(label: str, bg_color: tuple[int, int, int]) -> np.ndarray:
    """White label text centred on a solid background."""
    img = Image.new("RGB", SIZE, bg_color)
    draw = ImageDraw.Draw(img)
    try:
        font = ImageFont.truetype(
            "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf", 48
        )
    except OSError:
        font = ImageFont.load_default()
    bbox = draw.textbbox((0, 0), label, font=font)
    tw, th = bbox[2] - bbox[0], bbox[3] - bbox[1]
    draw.text(
        ((SIZE[0] - tw) / 2, (SIZE[1] - th) / 2),
        label,
        fill=(255, 255, 255),
        font=font,
    )
    return np.array(img)


def main():
    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    library = {"hook": [], "body": [], "cta": []}

    for category, cid, color, duration in CLIPS:
        out = OUTPUT_DIR / f"{cid}.mp4"
        library[category].append({"id": cid, "path": f"${{clips}}/{cid}.mp4"})
        if out.exists():
            print(f"  skip {cid} (exists)")
            continue

        frame = _make_frame(f"{category.upper()} {cid}", color)
        ImageClip(frame, duration=duration).write_videofile(str(out), fps=FPS, logger=None)
        print(f"  wrote {cid} ({duration}s)")

    manifest = {
        "video": {"fps": FPS, "size": list(SIZE)},
        "paths": {"clips": str(OUTPUT_DIR)},
        "library": library,
        "timeline": TIMELINE,
    }
    manifest_path = HERE / "demo-session.yaml"
    with open(manifest_path, "w") as f:
        yaml.safe_dump(manifest, f, sort_keys=False)

    print(f"\nDone. {len(CLIPS)} clips in {OUTPUT_DIR}, manifest {manifest_path}")


if __name__ == "__main__":
    main()
