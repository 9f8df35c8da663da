"""Session manifest loader -- declarative build of one reel.

A session manifest lists the clips of each library and the timeline order,
so a reel can be built without the interactive editor. The timeline refers
to library entries by their manifest id; an id may appear more than once.

Session manifest schema:
  video:
    fps: 30
    size: [1080, 1920]      # optional, output width x height
    codec: libx264          # optional: "libx264" or "h264_nvenc"
  paths:
    clips: "/data/clips"
  library:
    hook:
      - id: h1
        path: "${clips}/hook.mp4"
    body:
      - id: b1
        path: "${clips}/body.mp4"
        name: "Product demo"  # optional display name
    cta:
      - id: c1
        path: "${clips}/cta.mp4"
  timeline: [h1, b1, c1]
"""

from pathlib import Path

import yaml

from .clips import Category
from .common import resolve_path_vars
from .merge import DEFAULT_SIZE


VALID_CODECS = {"libx264", "h264_nvenc"}


def _validate_video(video: dict) -> dict:
    if "fps" not in video:
        raise ValueError("Session manifest: video.fps is required")
    fps = video["fps"]
    if isinstance(fps, bool) or not isinstance(fps, int) or fps <= 0:
        raise ValueError(f"Session manifest: video.fps must be a positive integer, got {fps!r}")

    size = video.get("size", list(DEFAULT_SIZE))
    if (
        not isinstance(size, (list, tuple))
        or len(size) != 2
        or not all(isinstance(v, int) and not isinstance(v, bool) and v > 0 for v in size)
    ):
        raise ValueError(
            f"Session manifest: video.size must be [width, height] of positive integers, got {size!r}"
        )
    video["size"] = tuple(size)

    codec = video.get("codec", "libx264")
    if codec not in VALID_CODECS:
        raise ValueError(
            f"Session manifest: invalid video.codec '{codec}'. Valid: {sorted(VALID_CODECS)}"
        )
    video["codec"] = codec
    return video


def load_session_manifest(manifest_path: str | Path) -> dict:
    """Load, validate, and normalize a session manifest.

    Processing pipeline:
      1. Parse YAML.
      2. Validate video settings (fps, size, codec), applying defaults.
      3. Resolve ${path} variables in library paths.
      4. Validate library entries (category, id, path) and id uniqueness.
      5. Check that every timeline reference names a library entry.

    Returns:
        Normalized config dict: {"video", "library", "timeline"}, where
        library maps each Category to a list of {"id", "path", "name"}.

    Raises:
        ValueError: Missing/invalid fields.
    """
    with open(manifest_path) as f:
        raw = yaml.safe_load(f) or {}

    if "video" not in raw:
        raise ValueError("Session manifest: missing required 'video' section")
    video = _validate_video(dict(raw["video"]))

    paths = raw.get("paths", {}) or {}

    if "library" not in raw:
        raise ValueError("Session manifest: missing required 'library' section")

    raw_library = raw["library"] or {}
    if not isinstance(raw_library, dict):
        raise ValueError("Session manifest: 'library' must map categories to clip lists")

    library = {c: [] for c in Category}
    seen_ids = set()
    for key, entries in raw_library.items():
        category = Category.parse(key)
        for i, entry in enumerate(entries or []):
            if "id" not in entry:
                raise ValueError(f"Library {category.value} entry {i}: missing required field 'id'")
            if "path" not in entry:
                raise ValueError(f"Library {category.value} entry {i}: missing required field 'path'")
            cid = str(entry["id"])
            if cid in seen_ids:
                raise ValueError(f"Duplicate library id: '{cid}'")
            seen_ids.add(cid)

            path = resolve_path_vars(str(entry["path"]), paths)
            library[category].append({
                "id": cid,
                "path": path,
                "name": str(entry.get("name") or Path(path).name),
            })

    timeline = [str(ref) for ref in raw.get("timeline", []) or []]
    unknown = [ref for ref in timeline if ref not in seen_ids]
    if unknown:
        raise ValueError(f"Session manifest: timeline references unknown ids: {unknown}")

    return {"video": video, "library": library, "timeline": timeline}


def validate_session_paths(config: dict) -> None:
    """Check that every library clip exists on disk.

    Raises:
        FileNotFoundError: Lists all missing files.
    """
    missing = []
    for entries in config["library"].values():
        for entry in entries:
            if not Path(entry["path"]).exists():
                missing.append(entry["path"])

    if missing:
        msg = f"Missing {len(missing)} clip file(s):\n"
        for p in missing:
            msg += f"  - {p}\n"
        raise FileNotFoundError(msg)
