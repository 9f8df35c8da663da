"""CLI for building a reel from a session manifest.

Ingests every library clip, lays out the timeline in manifest order, checks
that it has at least one hook, body and CTA clip, then merges it with ffmpeg.

Usage:
    reelbuilder build --manifest session.yaml --output reel.mp4
    reelbuilder build --manifest session.yaml --validate
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from .common import format_duration
from .engine import AssemblyEngine
from .errors import MergeFailed, NotReady
from .generation import GenerationState
from .ingest import ingest_file
from .merge import FfmpegMerger
from .readiness import readiness_message
from .session_manifest import load_session_manifest, validate_session_paths


def build_engine(config: dict, merger, thumbnail_dir=None) -> AssemblyEngine:
    """Ingest the manifest's library and lay out its timeline."""
    engine = AssemblyEngine(merger)

    by_id = {}
    for category, entries in config["library"].items():
        for entry in entries:
            clip = ingest_file(
                engine.registry, entry["path"], category,
                thumbnail_dir=thumbnail_dir, name=entry["name"],
            )
            by_id[entry["id"]] = clip
            print(f"  {category.label:<5} {entry['id']:<12} {format_duration(clip.duration)}  {entry['path']}")

    for ref in config["timeline"]:
        engine.add_to_timeline(by_id[ref].id)
    return engine


async def _generate(engine: AssemblyEngine):
    return await engine.generate()


def build(
    manifest_path: str,
    output_path: str,
    codec: str | None = None,
    timeout: float | None = None,
    thumbnail_dir: str | None = None,
) -> str:
    """Build the reel described by a session manifest.

    Returns:
        Path of the merged video.

    Raises:
        NotReady: The timeline lacks a hook, body or CTA clip.
        MergeFailed: ffmpeg could not produce the output.
    """
    config = load_session_manifest(manifest_path)
    validate_session_paths(config)
    video = config["video"]

    output = Path(output_path)
    merger = FfmpegMerger(
        output_dir=output.parent,
        output_name=output.name,
        fps=video["fps"],
        size=video["size"],
        codec=codec or video["codec"],
        timeout=timeout,
    )

    print("Ingesting library...")
    engine = build_engine(config, merger, thumbnail_dir=thumbnail_dir)

    total = engine.timeline.total_duration()
    print(f"\nTimeline: {len(engine.timeline)} clips, ~{format_duration(total)}")
    for entry in engine.timeline:
        print(f"  [{entry.position}] {entry.clip.category.label:<5} {entry.clip.name}")

    if not engine.ready:
        raise NotReady(readiness_message(engine.timeline))

    print(f"\nMerging to: {output}")
    status = asyncio.run(_generate(engine))
    if status.state is not GenerationState.SUCCEEDED:
        raise MergeFailed(status.reason)
    return status.artifact_ref


def main(args=None):
    parser = argparse.ArgumentParser(
        description="Build a Hook/Body/CTA reel from a session manifest.",
    )
    parser.add_argument(
        "--manifest", required=True,
        help="Path to YAML session manifest",
    )
    parser.add_argument(
        "--output",
        help="Output mp4 path (required unless --validate)",
    )
    parser.add_argument(
        "--gpu", action="store_true",
        help="Use GPU encoding (h264_nvenc). Overrides video.codec.",
    )
    parser.add_argument(
        "--timeout", type=float, default=None,
        help="Give up on the merge after this many seconds",
    )
    parser.add_argument(
        "--thumbnails", default=None,
        help="Directory to write clip thumbnails into",
    )
    parser.add_argument(
        "--validate", action="store_true",
        help="Validate manifest only -- check paths, don't render",
    )
    parser.add_argument(
        "--verbose", action="store_true",
        help="Enable debug logging",
    )
    parsed = parser.parse_args(args)

    logging.basicConfig(
        level=logging.DEBUG if parsed.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if parsed.validate:
        config = load_session_manifest(parsed.manifest)
        validate_session_paths(config)
        n = sum(len(v) for v in config["library"].values())
        print(f"Session manifest valid: {n} library clips, {len(config['timeline'])} timeline entries")
        for i, ref in enumerate(config["timeline"]):
            print(f"  {i}: {ref}")
        print("All paths verified.")
        return

    if not parsed.output:
        parser.error("--output is required (unless using --validate)")

    try:
        artifact = build(
            parsed.manifest, parsed.output,
            codec="h264_nvenc" if parsed.gpu else None,
            timeout=parsed.timeout,
            thumbnail_dir=parsed.thumbnails,
        )
    except (NotReady, MergeFailed) as e:
        print(f"\nError: {e}", file=sys.stderr)
        sys.exit(1)
    print(f"\nDone: {artifact}")


if __name__ == "__main__":
    main()
