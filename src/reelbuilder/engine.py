"""Timeline assembly engine -- all state of one editing session.

Owns the clip registry, the timeline, the drag controller and the generation
coordinator, and keeps a readiness flag that is recomputed after every
timeline mutation. Nothing here is module-level: each session builds its own
engine and the whole thing is discarded when the session ends.
"""

import asyncio
import logging

from .clips import Category, Clip, ClipRegistry
from .drag import DragController
from .generation import GenerationCoordinator, GenerationStatus, MergeCollaborator
from .readiness import is_ready_to_generate, missing_categories
from .timeline import TimelineSequence

logger = logging.getLogger(__name__)


class AssemblyEngine:
    def __init__(self, merge: MergeCollaborator):
        self.registry = ClipRegistry()
        self.timeline = TimelineSequence()
        self.drag = DragController(self.registry, self.timeline)
        self.coordinator = GenerationCoordinator(merge)
        self._ready = False
        self.timeline.subscribe(self._on_timeline_changed)

    def _on_timeline_changed(self, timeline: TimelineSequence) -> None:
        ready = is_ready_to_generate(timeline)
        if ready != self._ready:
            logger.debug("Timeline readiness changed: %s", ready)
        self._ready = ready

    @property
    def ready(self) -> bool:
        return self._ready

    @property
    def missing(self) -> list[Category]:
        return missing_categories(self.timeline)

    # Shortcuts for the non-drag UI paths (click-to-add, remove button).

    def ingest(self, category, name, duration, media_ref, thumbnail_ref=None) -> Clip:
        return self.registry.ingest(category, name, duration, media_ref, thumbnail_ref)

    def add_to_timeline(self, clip_id: str) -> str:
        return self.timeline.append(self.registry.lookup(clip_id))

    def remove_from_timeline(self, slot_id: str) -> None:
        self.timeline.remove_by_slot(slot_id)

    def reset_timeline(self) -> None:
        """Empty the timeline and clear any generation result."""
        self.timeline.clear()
        self.coordinator.reset()

    def generate(self) -> asyncio.Task:
        return self.coordinator.request_generation(self.timeline)

    @property
    def generation(self) -> GenerationStatus:
        return self.coordinator.status
