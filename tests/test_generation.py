"""Tests for the generation coordinator.

Async behaviour is driven with asyncio.run() inside plain tests. The merge
collaborator is a small fake that records manifests and can be held open
with an asyncio.Event to observe the in-flight state.
"""

import asyncio

import pytest

from reelbuilder.errors import AlreadyInFlight, MergeFailed, NotReady
from reelbuilder.generation import (
    GenerationCoordinator,
    GenerationState,
    GenerationStatus,
    ManifestItem,
    build_manifest,
)
from reelbuilder.timeline import TimelineSequence


class FakeMerger:
    def __init__(self, artifact="out.mp4", error=None):
        self.artifact = artifact
        self.error = error
        self.calls = []
        self.gate = None

    async def __call__(self, manifest):
        self.calls.append(manifest)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.artifact


@pytest.fixture
def ready_timeline(hook, body, cta):
    timeline = TimelineSequence()
    for clip in (body, hook, cta):
        timeline.append(clip)
    return timeline


class TestBuildManifest:
    def test_media_refs_in_order_with_duplicates(self, hook, body):
        manifest = build_manifest((hook, body, hook))
        assert manifest == (
            ManifestItem("/media/h1.mp4"),
            ManifestItem("/media/b1.mp4"),
            ManifestItem("/media/h1.mp4"),
        )


class TestPreconditions:
    def test_starts_idle(self):
        coordinator = GenerationCoordinator(FakeMerger())
        assert coordinator.status == GenerationStatus(GenerationState.IDLE)

    def test_not_ready_raises_without_calling_merge(self, hook, body):
        merger = FakeMerger()
        coordinator = GenerationCoordinator(merger)
        timeline = TimelineSequence()
        timeline.append(hook)
        timeline.append(body)

        async def run():
            with pytest.raises(NotReady, match="CTA"):
                coordinator.request_generation(timeline)

        asyncio.run(run())
        assert merger.calls == []
        assert coordinator.state is GenerationState.IDLE

    def test_request_outside_event_loop_leaves_state_idle(self, ready_timeline):
        merger = FakeMerger()
        coordinator = GenerationCoordinator(merger)

        with pytest.raises(RuntimeError):
            coordinator.request_generation(ready_timeline)
        assert coordinator.state is GenerationState.IDLE
        assert coordinator.snapshot == ()

        async def run():
            return await coordinator.request_generation(ready_timeline)

        status = asyncio.run(run())
        assert status.state is GenerationState.SUCCEEDED
        assert len(merger.calls) == 1

    def test_second_request_rejected_while_in_flight(self, ready_timeline):
        merger = FakeMerger()
        coordinator = GenerationCoordinator(merger)

        async def run():
            task = coordinator.request_generation(ready_timeline)
            assert coordinator.state is GenerationState.IN_FLIGHT
            with pytest.raises(AlreadyInFlight):
                coordinator.request_generation(ready_timeline)
            return await task

        status = asyncio.run(run())
        assert len(merger.calls) == 1
        assert status.state is GenerationState.SUCCEEDED


class TestOutcomes:
    def test_success(self, ready_timeline):
        coordinator = GenerationCoordinator(FakeMerger("out.mp4"))

        async def run():
            return await coordinator.request_generation(ready_timeline)

        status = asyncio.run(run())
        assert status == GenerationStatus(GenerationState.SUCCEEDED, artifact_ref="out.mp4")
        assert coordinator.status == status

    def test_sync_collaborator(self, ready_timeline):
        seen = []

        def merge(manifest):
            seen.append(manifest)
            return "sync.mp4"

        coordinator = GenerationCoordinator(merge)

        async def run():
            return await coordinator.request_generation(ready_timeline)

        status = asyncio.run(run())
        assert status.artifact_ref == "sync.mp4"
        assert len(seen) == 1

    def test_failure_captured_as_state(self, ready_timeline):
        merger = FakeMerger(error=MergeFailed("backend exploded"))
        coordinator = GenerationCoordinator(merger)
        before = ready_timeline.slot_ids()

        async def run():
            return await coordinator.request_generation(ready_timeline)

        status = asyncio.run(run())
        assert status.state is GenerationState.FAILED
        assert status.reason == "backend exploded"
        assert coordinator.state is GenerationState.FAILED
        assert ready_timeline.slot_ids() == before

    def test_timeout_error_reason_falls_back_to_type(self, ready_timeline):
        coordinator = GenerationCoordinator(FakeMerger(error=TimeoutError()))

        async def run():
            return await coordinator.request_generation(ready_timeline)

        assert asyncio.run(run()).reason == "TimeoutError"

    def test_retry_after_failure(self, ready_timeline):
        merger = FakeMerger(error=MergeFailed("flaky"))
        coordinator = GenerationCoordinator(merger)

        async def run():
            first = await coordinator.request_generation(ready_timeline)
            merger.error = None
            second = await coordinator.request_generation(ready_timeline)
            return first, second

        first, second = asyncio.run(run())
        assert first.state is GenerationState.FAILED
        assert second.state is GenerationState.SUCCEEDED
        assert len(merger.calls) == 2


class TestSnapshot:
    def test_edits_during_flight_do_not_change_manifest(self, ready_timeline, hook):
        merger = FakeMerger()
        coordinator = GenerationCoordinator(merger)

        async def run():
            merger.gate = asyncio.Event()
            task = coordinator.request_generation(ready_timeline)
            await asyncio.sleep(0)
            ready_timeline.append(hook)
            ready_timeline.move_by_slot(ready_timeline.slot_ids()[0], 3)
            merger.gate.set()
            return await task

        asyncio.run(run())
        refs = [item.media_ref for item in merger.calls[0]]
        assert refs == ["/media/b1.mp4", "/media/h1.mp4", "/media/c1.mp4"]
        assert [c.name for c in coordinator.snapshot] == ["b1", "h1", "c1"]
        assert len(ready_timeline) == 4


class TestReset:
    def test_reset_after_success(self, ready_timeline):
        coordinator = GenerationCoordinator(FakeMerger())

        async def run():
            await coordinator.request_generation(ready_timeline)

        asyncio.run(run())
        coordinator.reset()
        assert coordinator.state is GenerationState.IDLE

    def test_reset_discards_in_flight_result(self, ready_timeline):
        merger = FakeMerger("late.mp4")
        coordinator = GenerationCoordinator(merger)

        async def run():
            merger.gate = asyncio.Event()
            task = coordinator.request_generation(ready_timeline)
            await asyncio.sleep(0)
            coordinator.reset()
            assert coordinator.state is GenerationState.IDLE
            merger.gate.set()
            return await task

        status = asyncio.run(run())
        # The task still reports what the merge did...
        assert status.artifact_ref == "late.mp4"
        # ...but the coordinator ignored it.
        assert coordinator.state is GenerationState.IDLE

    def test_new_request_refused_until_superseded_merge_finishes(self, ready_timeline):
        merger = FakeMerger()
        coordinator = GenerationCoordinator(merger)

        async def run():
            merger.gate = asyncio.Event()
            task = coordinator.request_generation(ready_timeline)
            await asyncio.sleep(0)
            coordinator.reset()
            assert coordinator.busy
            with pytest.raises(AlreadyInFlight):
                coordinator.request_generation(ready_timeline)
            merger.gate.set()
            await task
            assert not coordinator.busy
            return await coordinator.request_generation(ready_timeline)

        status = asyncio.run(run())
        assert status.state is GenerationState.SUCCEEDED
        assert len(merger.calls) == 2
