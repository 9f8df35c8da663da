"""Timeline sequence -- the ordered, mutable list of clip occurrences.

Each occurrence of a clip on the timeline is a slot with its own id, so the
same clip may appear several times and every mutation addresses one
specific occurrence ("remove this slot"), never "remove this clip".

Storage is an arena of slot_id -> Clip plus an explicit order list of slot
ids. Positions are never stored: an entry's position is its index in the
order list, which keeps them contiguous (0..n-1) after every operation.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Callable, Iterator

from .clips import Clip
from .errors import SlotNotFound

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimelineEntry:
    slot_id: str
    clip: Clip
    position: int


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


class TimelineSequence:
    def __init__(self):
        self._clips: dict[str, Clip] = {}
        self._order: list[str] = []
        self._listeners: list[Callable[["TimelineSequence"], None]] = []

    # ── Change notification ────────────────────────────────────────

    def subscribe(self, listener: Callable[["TimelineSequence"], None]) -> None:
        """Call `listener(sequence)` after every mutation that changed it."""
        self._listeners.append(listener)

    def _changed(self) -> None:
        for listener in self._listeners:
            listener(self)

    def _new_slot_id(self) -> str:
        slot_id = uuid.uuid4().hex
        while slot_id in self._clips:
            slot_id = uuid.uuid4().hex
        return slot_id

    # ── Mutations ──────────────────────────────────────────────────

    def append(self, clip: Clip) -> str:
        """Add an occurrence of `clip` at the end. Returns its slot id."""
        return self.insert(clip, len(self._order))

    def insert(self, clip: Clip, index: int) -> str:
        """Add an occurrence of `clip` at `index`, clamped to [0, n]."""
        index = _clamp(index, 0, len(self._order))
        slot_id = self._new_slot_id()
        self._clips[slot_id] = clip
        self._order.insert(index, slot_id)
        logger.debug("Inserted clip %s as slot %s at %d", clip.id, slot_id, index)
        self._changed()
        return slot_id

    def remove_by_slot(self, slot_id: str) -> None:
        """Delete one occurrence. Absent slots are a silent no-op."""
        if slot_id not in self._clips:
            logger.debug("Remove of absent slot %s ignored", slot_id)
            return
        self._order.remove(slot_id)
        del self._clips[slot_id]
        self._changed()

    def move_by_slot(self, slot_id: str, target_index: int) -> None:
        """Relocate one occurrence to `target_index`, clamped to [0, n-1].

        Entries between the old and new position shift by one. Moving an
        absent slot, or to the slot's current index, is a no-op.
        """
        if slot_id not in self._clips:
            logger.debug("Move of absent slot %s ignored", slot_id)
            return
        current = self._order.index(slot_id)
        target = _clamp(target_index, 0, len(self._order) - 1)
        if target == current:
            return
        self._order.pop(current)
        self._order.insert(target, slot_id)
        self._changed()

    def clear(self) -> None:
        if not self._order:
            return
        self._order.clear()
        self._clips.clear()
        self._changed()

    # ── Read-only views ────────────────────────────────────────────

    def to_ordered_clip_list(self) -> tuple[Clip, ...]:
        return tuple(self._clips[s] for s in self._order)

    def entries(self) -> list[TimelineEntry]:
        return [
            TimelineEntry(slot_id=s, clip=self._clips[s], position=i)
            for i, s in enumerate(self._order)
        ]

    def slot_ids(self) -> list[str]:
        return list(self._order)

    def entry(self, slot_id: str) -> TimelineEntry:
        if slot_id not in self._clips:
            raise SlotNotFound(f"Unknown timeline slot: '{slot_id}'")
        return TimelineEntry(
            slot_id=slot_id,
            clip=self._clips[slot_id],
            position=self._order.index(slot_id),
        )

    def position_of(self, slot_id: str) -> int:
        return self.entry(slot_id).position

    def total_duration(self) -> float:
        return sum(c.duration for c in self._clips.values())

    def __len__(self) -> int:
        return len(self._order)

    def __iter__(self) -> Iterator[TimelineEntry]:
        return iter(self.entries())

    def __contains__(self, slot_id) -> bool:
        return slot_id in self._clips
