"""Clip entity and the category-partitioned clip registry.

Clips arrive from ingestion with a category fixed by the library they were
uploaded into. The registry keeps one insertion-ordered mapping per
category; clips are never removed, so a clip dropped from the timeline can
always be added again.
"""

import logging
import math
import uuid
from dataclasses import dataclass
from enum import Enum

from .errors import ClipNotFound, InvalidDuration

logger = logging.getLogger(__name__)


class Category(str, Enum):
    HOOK = "hook"
    BODY = "body"
    CTA = "cta"

    @classmethod
    def parse(cls, value: "str | Category") -> "Category":
        """Accept a Category or its name, case-insensitive ('hooks' too)."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        if key == "hooks":
            key = "hook"
        try:
            return cls(key)
        except ValueError:
            raise ValueError(
                f"Unknown clip category '{value}'. "
                f"Valid: {[c.value for c in cls]}"
            ) from None

    @property
    def label(self) -> str:
        return "CTA" if self is Category.CTA else self.value.capitalize()


@dataclass(frozen=True)
class Clip:
    id: str
    category: Category
    name: str
    duration: float
    media_ref: str
    thumbnail_ref: str | None = None


def new_clip_id() -> str:
    return uuid.uuid4().hex


def _check_duration(duration) -> float:
    if isinstance(duration, bool) or not isinstance(duration, (int, float)):
        raise InvalidDuration(f"Clip duration must be a number, got {duration!r}")
    if math.isnan(duration) or duration < 0:
        raise InvalidDuration(f"Clip duration must be >= 0, got {duration!r}")
    return float(duration)


class ClipRegistry:
    """Three disjoint id -> Clip mappings, one per category."""

    def __init__(self):
        self._libraries: dict[Category, dict[str, Clip]] = {c: {} for c in Category}

    def ingest(
        self,
        category: "Category | str",
        name: str,
        duration: float,
        media_ref: str,
        thumbnail_ref: str | None = None,
    ) -> Clip:
        """Register a newly ingested clip under a fresh unique id.

        Raises:
            InvalidDuration: duration is negative or not a number. Nothing
                is registered in that case.
            ValueError: unknown category.
        """
        category = Category.parse(category)
        duration = _check_duration(duration)

        clip_id = new_clip_id()
        while clip_id in self:
            clip_id = new_clip_id()

        clip = Clip(
            id=clip_id,
            category=category,
            name=name,
            duration=duration,
            media_ref=str(media_ref),
            thumbnail_ref=None if thumbnail_ref is None else str(thumbnail_ref),
        )
        self._libraries[category][clip_id] = clip
        logger.debug("Ingested %s clip %s (%s, %.2fs)", category.value, clip_id, name, duration)
        return clip

    def list_by_category(self, category: "Category | str") -> list[Clip]:
        return list(self._libraries[Category.parse(category)].values())

    def lookup(self, clip_id: str) -> Clip:
        for library in self._libraries.values():
            if clip_id in library:
                return library[clip_id]
        raise ClipNotFound(f"Unknown clip id: '{clip_id}'")

    def all_clips(self) -> list[Clip]:
        """Every clip, hook library first, then body, then CTA."""
        return [clip for c in Category for clip in self._libraries[c].values()]

    def __contains__(self, clip_id) -> bool:
        return any(clip_id in library for library in self._libraries.values())

    def __len__(self) -> int:
        return sum(len(library) for library in self._libraries.values())
