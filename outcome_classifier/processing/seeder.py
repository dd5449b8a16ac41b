"""Embed the built-in outcome descriptions into a description store."""

import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field

from ..config import SEED_REQUEST_DELAY
from ..constants import OUTCOME_SEEDS
from ..exceptions import ExternalServiceUnavailableError, InvalidInputError
from ..models.description import DescriptionSource, OutcomeDescription, detect_language
from ..models.outcome import OutcomeType
from ..services.description_store import DescriptionStore
from .feedback_manager import Embedder

logger = logging.getLogger(__name__)


@dataclass
class SeedReport:
    """Counts from one seeding run."""

    seeded: int = 0
    skipped: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.seeded + self.skipped + self.failed


def seed_system_descriptions(
    store: DescriptionStore,
    embedder: Embedder,
    seeds: Mapping[OutcomeType, tuple[str, ...]] = OUTCOME_SEEDS,
    delay: float = SEED_REQUEST_DELAY,
    progress_callback: Callable[[int, int], None] | None = None,
) -> SeedReport:
    """Embed every seed description as a global system entry.

    Seeds already in the store are skipped, so running this twice is safe.
    A failed embedding is counted and the run continues with the next seed.

    Args:
        store: Store to append to
        embedder: Embedding service
        seeds: Example descriptions per outcome
        delay: Seconds to wait between embedding requests
        progress_callback: Called with (done, total) after each seed

    Returns:
        SeedReport with seeded, skipped and failed counts

    """
    report = SeedReport()
    items = [
        (outcome, text.strip())
        for outcome in OutcomeType.known()
        for text in seeds.get(outcome, ())
        if text.strip()
    ]
    logger.info(f"Seeding {len(items)} system descriptions")

    requested = False
    for index, (outcome, text) in enumerate(items, start=1):
        if store.contains(outcome, text, company_id=None):
            report.skipped += 1
        else:
            if requested and delay > 0:
                # Rate limiting
                time.sleep(delay)
            requested = True
            try:
                embedding = embedder.embed(text)
                store.add(OutcomeDescription(
                    metric_key=outcome,
                    description=text,
                    embedding=tuple(float(x) for x in embedding),
                    source=DescriptionSource.SYSTEM,
                    language=detect_language(text),
                ))
                report.seeded += 1
            except (ExternalServiceUnavailableError, InvalidInputError) as e:
                logger.warning(f"Failed to seed '{text[:40]}' for {outcome.value}: {e!s}")
                report.failed += 1
                report.errors.append(f"{outcome.value}: {text}: {e!s}")

        if progress_callback:
            progress_callback(index, len(items))

    logger.info(
        f"Seeding complete: {report.seeded} seeded, {report.skipped} skipped, {report.failed} failed"
    )
    return report
