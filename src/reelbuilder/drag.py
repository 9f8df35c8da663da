"""Drag-reorder protocol -- pointer gestures to timeline mutations.

One DragController per session translates a pointer gesture into at most one
timeline mutation:

    idle --pointer_down--> dragging --hover_*--> hovering --release--> idle
                              ^                     |
                              +----leave_target-----+

Two kinds of drag source exist, a clip from a category library and an entry
already on the timeline. Hover callbacks only update the predicted drop
zone; the timeline is touched exactly once, in release().

Drop rules:
  - library clip onto open timeline space, or released outside any drop
    surface: append to the end of the timeline.
  - library clip onto an entry: insert before the entry when the pointer is
    left of its midpoint, after it otherwise.
  - timeline entry onto an entry: move to the predicted index.
  - timeline entry onto open timeline space: move to the end.
  - timeline entry released outside any drop surface: no-op.

Index prediction for a timeline entry follows the usual half-width rule: a
neighbour only becomes the target once the pointer crosses its midpoint in
the direction of travel, which stops adjacent entries from flickering back
and forth while the pointer sits near a boundary.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from .clips import ClipRegistry
from .timeline import TimelineSequence

logger = logging.getLogger(__name__)


class DragPhase(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    HOVERING = "hovering"


class SourceKind(str, Enum):
    LIBRARY_CLIP = "library_clip"
    TIMELINE_ENTRY = "timeline_entry"


class DropZoneKind(str, Enum):
    APPEND = "append"
    INDEX = "index"


@dataclass(frozen=True)
class DragSource:
    """What is being dragged: a clip id (library) or a slot id (timeline)."""
    kind: SourceKind
    ref: str


@dataclass(frozen=True)
class DropZone:
    kind: DropZoneKind
    index: int | None = None


@dataclass(frozen=True)
class DropResult:
    """The single mutation a completed gesture performed."""
    action: str  # "appended", "inserted" or "moved"
    slot_id: str
    index: int


APPEND_ZONE = DropZone(DropZoneKind.APPEND)


class DragController:
    def __init__(self, registry: ClipRegistry, timeline: TimelineSequence):
        self.registry = registry
        self.timeline = timeline
        self._source: DragSource | None = None
        self._zone: DropZone | None = None
        # Running index prediction for a timeline-entry source.
        self._predicted: int | None = None
        timeline.subscribe(self._on_timeline_changed)

    @property
    def phase(self) -> DragPhase:
        if self._source is None:
            return DragPhase.IDLE
        if self._zone is None:
            return DragPhase.DRAGGING
        return DragPhase.HOVERING

    @property
    def source(self) -> DragSource | None:
        return self._source

    @property
    def drop_zone(self) -> DropZone | None:
        return self._zone

    def _on_timeline_changed(self, timeline: TimelineSequence) -> None:
        # Indices shifted under a dragged entry: restart prediction from
        # where the entry is now.
        source = self._source
        if source is None or source.kind is not SourceKind.TIMELINE_ENTRY:
            return
        if source.ref not in timeline:
            return
        self._predicted = timeline.position_of(source.ref)
        if self._zone is not None and self._zone.kind is DropZoneKind.INDEX:
            self._zone = DropZone(DropZoneKind.INDEX, self._predicted)

    def _reset(self) -> None:
        self._source = None
        self._zone = None
        self._predicted = None

    def _begin(self, source: DragSource) -> None:
        if self._source is not None:
            logger.debug("Abandoning stale drag of %s", self._source)
        self._reset()
        self._source = source

    # ── Pointer down ───────────────────────────────────────────────

    def pointer_down_library(self, clip_id: str) -> None:
        """Start dragging a library clip. Raises ClipNotFound if unknown."""
        self.registry.lookup(clip_id)
        self._begin(DragSource(SourceKind.LIBRARY_CLIP, clip_id))

    def pointer_down_entry(self, slot_id: str) -> None:
        """Start dragging a timeline entry. Raises SlotNotFound if unknown."""
        position = self.timeline.position_of(slot_id)
        self._begin(DragSource(SourceKind.TIMELINE_ENTRY, slot_id))
        self._predicted = position

    # ── Pointer move ───────────────────────────────────────────────

    def hover_append(self) -> DropZone | None:
        """Pointer is over open timeline space (not over an entry)."""
        if self._source is None:
            return None
        self._zone = APPEND_ZONE
        return self._zone

    def hover_entry(
        self,
        hovered_index: int,
        pointer_x: float,
        left: float,
        right: float,
    ) -> DropZone | None:
        """Pointer is over the timeline entry at `hovered_index`.

        `left` and `right` bound the hovered entry on the drag axis; the
        entry is bisected at their midpoint. Returns the predicted drop zone
        (None when no drag is in progress).
        """
        if self._source is None:
            return None
        middle = left + (right - left) / 2
        source = self._source

        if source.kind is SourceKind.LIBRARY_CLIP:
            index = hovered_index if pointer_x < middle else hovered_index + 1
            self._zone = DropZone(DropZoneKind.INDEX, index)

        elif source.kind is SourceKind.TIMELINE_ENTRY:
            drag_index = self._predicted
            moving_right = drag_index < hovered_index and pointer_x >= middle
            moving_left = drag_index > hovered_index and pointer_x <= middle
            if moving_right or moving_left:
                self._predicted = hovered_index
            self._zone = DropZone(DropZoneKind.INDEX, self._predicted)

        else:
            raise ValueError(f"Unknown drag source kind: {source.kind!r}")

        return self._zone

    def leave_target(self) -> None:
        """Pointer left every drop surface; keep dragging, forget the zone."""
        if self._source is not None:
            self._zone = None

    # ── Pointer up / cancel ────────────────────────────────────────

    def cancel(self) -> None:
        """Escape key or lost pointer capture: back to idle, no mutation."""
        self._reset()

    def release(self) -> DropResult | None:
        """Finish the gesture, applying at most one timeline mutation."""
        source, zone = self._source, self._zone
        self._reset()
        if source is None:
            return None

        if source.kind is SourceKind.LIBRARY_CLIP:
            clip = self.registry.lookup(source.ref)
            if zone is None or zone.kind is DropZoneKind.APPEND:
                slot_id = self.timeline.append(clip)
                return DropResult("appended", slot_id, len(self.timeline) - 1)
            slot_id = self.timeline.insert(clip, zone.index)
            return DropResult("inserted", slot_id, self.timeline.position_of(slot_id))

        if source.kind is SourceKind.TIMELINE_ENTRY:
            if zone is None:
                return None
            if source.ref not in self.timeline:
                # Removed while it was being dragged.
                logger.debug("Dropped slot %s no longer on the timeline", source.ref)
                return None
            if zone.kind is DropZoneKind.APPEND:
                target = len(self.timeline) - 1
            else:
                target = zone.index
            self.timeline.move_by_slot(source.ref, target)
            return DropResult("moved", source.ref, self.timeline.position_of(source.ref))

        raise ValueError(f"Unknown drag source kind: {source.kind!r}")
