"""Shared test fixtures for reelbuilder tests."""

import subprocess

import pytest
import imageio_ffmpeg

from reelbuilder.clips import ClipRegistry

_FFMPEG = imageio_ffmpeg.get_ffmpeg_exe()


def _write_color_video(out, duration, color="blue", size="320x240", audio=True):
    cmd = [
        _FFMPEG, "-y",
        "-f", "lavfi", "-i", f"color=c={color}:s={size}:d={duration}:r=10",
    ]
    if audio:
        cmd += ["-f", "lavfi", "-i", "anullsrc=r=44100:cl=mono", "-shortest"]
    cmd += ["-c:v", "libx264", "-crf", "28", "-pix_fmt", "yuv420p"]
    if audio:
        cmd += ["-c:a", "aac", "-b:a", "32k"]
    cmd.append(str(out))
    subprocess.run(cmd, check=True, capture_output=True)
    return out


@pytest.fixture
def source_video(tmp_path):
    """Create a 5-second test video (320x240, 10fps) with audio using ffmpeg."""
    return _write_color_video(tmp_path / "source.mp4", 5)


@pytest.fixture
def make_video(tmp_path):
    """Factory: make_video("hook.mp4", duration=2, color="red", size="320x240")."""
    def _make(name, duration=2, color="blue", size="320x240"):
        return _write_color_video(tmp_path / name, duration, color=color, size=size)
    return _make


@pytest.fixture
def registry():
    return ClipRegistry()


@pytest.fixture
def hook(registry):
    return registry.ingest("hook", "h1", 2.0, "/media/h1.mp4")


@pytest.fixture
def body(registry):
    return registry.ingest("body", "b1", 10.0, "/media/b1.mp4")


@pytest.fixture
def cta(registry):
    return registry.ingest("cta", "c1", 3.0, "/media/c1.mp4")
