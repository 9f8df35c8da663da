"""Completeness check gating generation.

A timeline is ready when it holds at least one hook, one body and one CTA
clip. Order and counts beyond one are irrelevant.
"""

from typing import Iterable

from .clips import Category, Clip
from .timeline import TimelineSequence


def _categories(sequence: "TimelineSequence | Iterable[Clip]") -> set[Category]:
    if isinstance(sequence, TimelineSequence):
        sequence = sequence.to_ordered_clip_list()
    return {clip.category for clip in sequence}


def missing_categories(sequence: "TimelineSequence | Iterable[Clip]") -> list[Category]:
    """Categories with no clip on the timeline, in hook/body/cta order."""
    present = _categories(sequence)
    return [c for c in Category if c not in present]


def is_ready_to_generate(sequence: "TimelineSequence | Iterable[Clip]") -> bool:
    return not missing_categories(sequence)


def readiness_message(sequence: "TimelineSequence | Iterable[Clip]") -> str | None:
    """Human-readable reason the timeline is not ready, or None if it is."""
    if isinstance(sequence, TimelineSequence):
        clips = sequence.to_ordered_clip_list()
    else:
        clips = tuple(sequence)
    missing = missing_categories(clips)
    if not missing:
        return None
    if not clips:
        return "Please add at least one clip to the timeline"
    return (
        "Your timeline must include at least one hook, one body, and one CTA "
        f"clip (missing: {', '.join(c.label for c in missing)})"
    )
