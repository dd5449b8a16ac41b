"""Utility functions for calculating classification statistics."""

from collections import Counter
from dataclasses import dataclass, field

from ..models.outcome import DetectionLayer, OutcomeType
from ..models.result import ClassificationResult


@dataclass
class ClassificationStatistics:
    """Container for batch classification statistics."""

    total: int
    by_outcome: dict[str, int] = field(default_factory=dict)
    by_layer: dict[str, int] = field(default_factory=dict)
    unknown: int = 0
    mean_confidence: float = 0.0
    skipped_tiers: int = 0

    @property
    def classified_rate(self) -> float:
        """Percentage of executions that got a known outcome."""
        return ((self.total - self.unknown) / self.total * 100) if self.total > 0 else 0.0

    def to_display_string(self) -> str:
        """Format statistics for display on the command line."""
        layers = " | ".join(f"{layer}: {count}" for layer, count in self.by_layer.items())
        return (
            f"Total: {self.total} | Classified: {self.classified_rate:.0f}% | "
            f"Mean confidence: {self.mean_confidence:.2f} | {layers}"
        )


def calculate_classification_statistics(
    results: list[ClassificationResult],
) -> ClassificationStatistics:
    """Calculate statistics for a batch of classification results.

    Args:
        results: List of classification results to analyze

    Returns:
        ClassificationStatistics object containing calculated statistics

    """
    total = len(results)

    if total == 0:
        return ClassificationStatistics(total=0)

    outcomes = Counter(r.metric_key.value for r in results)
    layers = Counter(r.detection_layer.value for r in results)

    return ClassificationStatistics(
        total=total,
        by_outcome={o.value: outcomes[o.value] for o in OutcomeType if outcomes[o.value]},
        by_layer={d.value: layers[d.value] for d in DetectionLayer if layers[d.value]},
        unknown=outcomes[OutcomeType.UNKNOWN.value],
        mean_confidence=sum(r.confidence for r in results) / total,
        skipped_tiers=sum(len(r.skipped_layers) for r in results),
    )
