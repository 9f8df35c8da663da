"""Render/merge -- concatenate the timeline's clips into one video.

Uses the ffmpeg binary bundled with imageio_ffmpeg. Every input is scaled
to fit the output frame, padded to exactly that size and resampled to the
output fps, then all inputs are joined with the concat filter. Video only:
no transitions and no audio, clips simply play back to back.
"""

import asyncio
import logging
import subprocess
import uuid
from pathlib import Path

import imageio_ffmpeg

from .errors import MergeFailed
from .generation import Manifest

logger = logging.getLogger(__name__)

_FFMPEG = imageio_ffmpeg.get_ffmpeg_exe()

DEFAULT_SIZE = (1080, 1920)  # vertical short-form
DEFAULT_FPS = 30


def _codec_params(codec):
    """Return (codec, ffmpeg_params) for the given codec name."""
    if codec == "h264_nvenc":
        return codec, ["-cq", "20", "-pix_fmt", "yuv420p"]
    return codec, ["-crf", "20", "-pix_fmt", "yuv420p"]


def build_concat_filter(n: int, size: tuple[int, int], fps: int) -> str:
    """Filter graph normalising n inputs and concatenating them to [vout]."""
    w, h = size
    parts = []
    for i in range(n):
        parts.append(
            f"[{i}:v]scale={w}:{h}:force_original_aspect_ratio=decrease:force_divisible_by=2,"
            f"pad={w}:{h}:(ow-iw)/2:(oh-ih)/2,setsar=1,fps={fps}[v{i}]"
        )
    labels = "".join(f"[v{i}]" for i in range(n))
    parts.append(f"{labels}concat=n={n}:v=1:a=0[vout]")
    return ";".join(parts)


def concat_clips(
    paths: list[str],
    output: str,
    fps: int = DEFAULT_FPS,
    size: tuple[int, int] = DEFAULT_SIZE,
    codec: str = "libx264",
    timeout: float | None = None,
) -> str:
    """Concatenate video files in order into `output`.

    Args:
        paths: Input videos, in playback order.
        output: Output mp4 path (parent directories are created).
        fps: Output frame rate.
        size: Output (width, height); inputs are letterboxed to fit.
        codec: "libx264" (CPU) or "h264_nvenc" (GPU).
        timeout: Seconds before ffmpeg is killed. None waits forever.

    Returns:
        The output path.

    Raises:
        MergeFailed: No inputs, missing inputs, ffmpeg error or timeout.
    """
    if not paths:
        raise MergeFailed("Nothing to merge: the manifest is empty")
    missing = [p for p in paths if not Path(p).exists()]
    if missing:
        raise MergeFailed(f"Missing {len(missing)} clip file(s): {', '.join(missing)}")

    Path(output).parent.mkdir(parents=True, exist_ok=True)
    codec_name, codec_ffparams = _codec_params(codec)

    inputs = []
    for p in paths:
        inputs.extend(["-i", str(p)])

    cmd = [
        _FFMPEG, "-y",
        *inputs,
        "-filter_complex", build_concat_filter(len(paths), size, fps),
        "-map", "[vout]",
        "-c:v", codec_name, *codec_ffparams,
        "-r", str(fps),
        "-an",
        output,
    ]
    logger.debug("Running %s", " ".join(cmd))
    try:
        subprocess.run(cmd, check=True, capture_output=True, timeout=timeout)
    except subprocess.TimeoutExpired as e:
        raise MergeFailed(f"Merge timed out after {e.timeout}s") from e
    except subprocess.CalledProcessError as e:
        stderr = (e.stderr or b"").decode(errors="replace").strip().splitlines()
        detail = stderr[-1] if stderr else f"exit code {e.returncode}"
        raise MergeFailed(f"ffmpeg failed: {detail}") from e
    return output


class FfmpegMerger:
    """Async merge collaborator for the generation coordinator.

    Each call writes `reel-<id>.mp4` into `output_dir` and returns its path
    as the artifact reference.
    """

    def __init__(
        self,
        output_dir: str | Path,
        fps: int = DEFAULT_FPS,
        size: tuple[int, int] = DEFAULT_SIZE,
        codec: str = "libx264",
        timeout: float | None = None,
        output_name: str | None = None,
    ):
        self.output_dir = Path(output_dir)
        self.fps = fps
        self.size = tuple(size)
        self.codec = codec
        self.timeout = timeout
        self.output_name = output_name

    def _output_path(self) -> str:
        name = self.output_name or f"reel-{uuid.uuid4().hex[:12]}.mp4"
        return str(self.output_dir / name)

    async def __call__(self, manifest: Manifest) -> str:
        paths = [item.media_ref for item in manifest]
        output = self._output_path()
        logger.info("Merging %d clips into %s", len(paths), output)
        # ffmpeg blocks; keep the event loop free for timeline edits.
        return await asyncio.to_thread(
            concat_clips, paths, output,
            fps=self.fps, size=self.size, codec=self.codec, timeout=self.timeout,
        )
