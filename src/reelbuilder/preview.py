"""Playback plan for the preview pane.

Once a merge has succeeded the preview plays the single merged artifact.
Until then it steps through the timeline clip by clip, in timeline order.
"""

from dataclasses import dataclass

from .clips import Clip
from .generation import GenerationState, GenerationStatus
from .timeline import TimelineSequence


@dataclass(frozen=True)
class PlaybackItem:
    media_ref: str
    start: float  # offset of this item within the preview, seconds
    duration: float | None
    clip: Clip | None = None


def build_playback_plan(
    sequence: TimelineSequence,
    status: GenerationStatus | None = None,
) -> list[PlaybackItem]:
    if status is not None and status.state is GenerationState.SUCCEEDED:
        return [PlaybackItem(media_ref=status.artifact_ref, start=0.0, duration=None)]

    plan = []
    t = 0.0
    for clip in sequence.to_ordered_clip_list():
        plan.append(PlaybackItem(clip.media_ref, t, clip.duration, clip))
        t += clip.duration
    return plan
