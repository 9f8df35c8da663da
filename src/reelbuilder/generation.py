"""Generation coordinator -- one merge request at a time.

request_generation() checks readiness, snapshots the timeline into an
immutable manifest and hands it to the merge collaborator on the running
asyncio loop. The timeline stays editable while the merge runs; edits made
meanwhile do not affect the request in flight.

State machine:

    idle --request--> in_flight --ok--> succeeded(artifact_ref)
                          |
                          +--error--> failed(reason)

reset() returns to idle at any time. It does not cancel a running merge:
the merge's eventual result is discarded, and a new request is refused with
AlreadyInFlight until the superseded merge has finished, so the collaborator
never sees two concurrent invocations.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable

from .clips import Clip
from .errors import AlreadyInFlight, NotReady
from .readiness import is_ready_to_generate, readiness_message
from .timeline import TimelineSequence

logger = logging.getLogger(__name__)


class GenerationState(str, Enum):
    IDLE = "idle"
    IN_FLIGHT = "in_flight"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class GenerationStatus:
    state: GenerationState
    artifact_ref: str | None = None
    reason: str | None = None


@dataclass(frozen=True)
class ManifestItem:
    """One entry of a merge request. Only playback order and media matter."""
    media_ref: str


Manifest = tuple[ManifestItem, ...]
MergeCollaborator = Callable[[Manifest], "str | Awaitable[str]"]

IDLE = GenerationStatus(GenerationState.IDLE)


def build_manifest(clips: "tuple[Clip, ...] | list[Clip]") -> Manifest:
    return tuple(ManifestItem(media_ref=c.media_ref) for c in clips)


def _is_async(merge: Any) -> bool:
    if inspect.iscoroutinefunction(merge):
        return True
    return inspect.iscoroutinefunction(getattr(merge, "__call__", None))


class GenerationCoordinator:
    def __init__(self, merge: MergeCollaborator):
        """
        Args:
            merge: The render/merge collaborator. Called with the manifest
                and returns the artifact reference, either directly or as
                an awaitable. Plain callables run in a worker thread.
                Any exception it raises becomes a failed state.
        """
        self.merge = merge
        self._status = IDLE
        self._task: asyncio.Task | None = None
        self._snapshot: tuple[Clip, ...] = ()
        # Bumped on every request and reset; stale results are dropped.
        self._generation = 0

    @property
    def status(self) -> GenerationStatus:
        return self._status

    @property
    def state(self) -> GenerationState:
        return self._status.state

    @property
    def snapshot(self) -> tuple[Clip, ...]:
        """Clips of the most recent request, in merge order."""
        return self._snapshot

    @property
    def busy(self) -> bool:
        """A merge invocation is still running (possibly a superseded one)."""
        return self._task is not None and not self._task.done()

    def request_generation(self, sequence: TimelineSequence) -> asyncio.Task:
        """Start a merge of the current timeline.

        Must be called from a running event loop. Returns the task driving
        the merge; awaiting it yields the final GenerationStatus.

        Raises:
            NotReady: the timeline lacks a hook, body or CTA clip.
            AlreadyInFlight: a merge is already running.
        """
        if not is_ready_to_generate(sequence):
            raise NotReady(readiness_message(sequence))
        if self._status.state is GenerationState.IN_FLIGHT or self.busy:
            raise AlreadyInFlight("A video is already being generated")
        # Raises RuntimeError outside an event loop; nothing is changed yet.
        loop = asyncio.get_running_loop()

        snapshot = sequence.to_ordered_clip_list()
        manifest = build_manifest(snapshot)
        self._snapshot = snapshot
        self._generation += 1
        self._status = GenerationStatus(GenerationState.IN_FLIGHT)
        logger.info("Generating video from %d clips", len(manifest))

        self._task = loop.create_task(
            self._run(manifest, self._generation)
        )
        return self._task

    async def _run(self, manifest: Manifest, generation: int) -> GenerationStatus:
        try:
            if _is_async(self.merge):
                artifact_ref = await self.merge(manifest)
            else:
                artifact_ref = await asyncio.to_thread(self.merge, manifest)
                if inspect.isawaitable(artifact_ref):
                    artifact_ref = await artifact_ref
            status = GenerationStatus(
                GenerationState.SUCCEEDED, artifact_ref=str(artifact_ref),
            )
        except Exception as exc:  # collaborator failures become state
            reason = str(exc) or type(exc).__name__
            logger.warning("Video generation failed: %s", reason)
            status = GenerationStatus(GenerationState.FAILED, reason=reason)

        if generation != self._generation:
            logger.info("Discarding result of superseded generation request")
            return status
        self._status = status
        if status.state is GenerationState.SUCCEEDED:
            logger.info("Video generated: %s", status.artifact_ref)
        return status

    def reset(self) -> None:
        """Back to idle. A running merge keeps running; its result is dropped."""
        self._generation += 1
        self._status = IDLE
