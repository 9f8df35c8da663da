"""Tests for the generation readiness check."""

from reelbuilder.clips import Category
from reelbuilder.readiness import (
    is_ready_to_generate,
    missing_categories,
    readiness_message,
)
from reelbuilder.timeline import TimelineSequence


class TestIsReadyToGenerate:
    def test_empty_not_ready(self):
        assert not is_ready_to_generate(TimelineSequence())

    def test_readiness_progression(self, hook, body, cta):
        timeline = TimelineSequence()
        timeline.append(hook)
        assert not is_ready_to_generate(timeline)
        timeline.append(body)
        assert not is_ready_to_generate(timeline)
        c = timeline.append(cta)
        assert is_ready_to_generate(timeline)
        timeline.remove_by_slot(c)
        assert not is_ready_to_generate(timeline)

    def test_order_irrelevant(self, hook, body, cta):
        timeline = TimelineSequence()
        for clip in (cta, body, hook):
            timeline.append(clip)
        assert is_ready_to_generate(timeline)

    def test_counts_beyond_one_irrelevant(self, registry, hook, cta):
        timeline = TimelineSequence()
        timeline.append(hook)
        for i in range(5):
            timeline.append(registry.ingest("body", f"b{i}", 1, f"/m/b{i}.mp4"))
        timeline.append(cta)
        assert is_ready_to_generate(timeline)

    def test_accepts_plain_clip_list(self, hook, body, cta):
        assert is_ready_to_generate([hook, body, cta])
        assert not is_ready_to_generate([hook, hook, cta])


class TestMissingCategories:
    def test_all_missing_when_empty(self):
        assert missing_categories([]) == [Category.HOOK, Category.BODY, Category.CTA]

    def test_reports_only_absent(self, hook, cta):
        assert missing_categories([cta, hook]) == [Category.BODY]


class TestReadinessMessage:
    def test_none_when_ready(self, hook, body, cta):
        assert readiness_message([hook, body, cta]) is None

    def test_empty_timeline(self):
        assert "at least one clip" in readiness_message([])

    def test_names_missing_categories(self, hook):
        msg = readiness_message([hook])
        assert "Body" in msg and "CTA" in msg
        assert "missing: Body, CTA" in msg

    def test_accepts_generator(self, hook, body):
        msg = readiness_message(c for c in [hook, body])
        assert "missing: CTA" in msg

    def test_empty_generator(self):
        assert "at least one clip" in readiness_message(c for c in [])
