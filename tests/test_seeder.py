"""Tests for seeding the built-in outcome descriptions."""

from types import MappingProxyType

from fakes import FailingEmbedder

from outcome_classifier.constants import OUTCOME_SEEDS
from outcome_classifier.models.description import DescriptionSource
from outcome_classifier.models.outcome import OutcomeType
from outcome_classifier.processing.seeder import seed_system_descriptions

SEEDS = MappingProxyType({
    OutcomeType.MEETING_BOOKED: ("meeting booked with customer", "安排看房預約"),
    OutcomeType.DEAL_WON: ("sale completed",),
})


class FlakyEmbedder:
    """Fails for one specific text."""

    def __init__(self, inner, failing_text):
        self.inner = inner
        self.failing_text = failing_text

    def embed(self, text):
        if text == self.failing_text:
            return FailingEmbedder().embed(text)
        return self.inner.embed(text)


class TestSeedSystemDescriptions:
    """Seeding is repeatable and tolerant of failures."""

    def test_seeds_global_system_descriptions(self, store, embedder):
        report = seed_system_descriptions(store, embedder, seeds=SEEDS, delay=0)

        assert (report.seeded, report.skipped, report.failed) == (3, 0, 0)
        descriptions = store.get_descriptions()
        assert all(d.is_global and d.source is DescriptionSource.SYSTEM for d in descriptions)
        assert [d.metric_key for d in descriptions] == [
            OutcomeType.MEETING_BOOKED, OutcomeType.MEETING_BOOKED, OutcomeType.DEAL_WON
        ]

    def test_second_run_skips_existing(self, store, embedder):
        seed_system_descriptions(store, embedder, seeds=SEEDS, delay=0)
        report = seed_system_descriptions(store, embedder, seeds=SEEDS, delay=0)

        assert (report.seeded, report.skipped, report.failed) == (0, 3, 0)
        assert store.count() == 3

    def test_failures_do_not_stop_the_run(self, store, embedder):
        report = seed_system_descriptions(
            store, FlakyEmbedder(embedder, "安排看房預約"), seeds=SEEDS, delay=0
        )

        assert (report.seeded, report.skipped, report.failed) == (2, 0, 1)
        assert "安排看房預約" in report.errors[0]
        assert report.total == 3

    def test_progress_callback(self, store, embedder):
        progress = []
        seed_system_descriptions(
            store, embedder, seeds=SEEDS, delay=0,
            progress_callback=lambda done, total: progress.append((done, total)),
        )
        assert progress == [(1, 3), (2, 3), (3, 3)]

    def test_builtin_seeds_cover_every_known_outcome(self):
        assert set(OUTCOME_SEEDS) == set(OutcomeType.known())
        assert OutcomeType.UNKNOWN not in OUTCOME_SEEDS
