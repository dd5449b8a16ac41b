"""Standardized fallback results for the outcome classifier."""

from ..models.outcome import DetectionLayer, OutcomeType
from ..models.result import ClassificationResult, DefaultReasoning
from ..models.summary import ExecutionSummary


def create_unknown_result(
    summary: ExecutionSummary,
    note: str = "No known outcome pattern matched",
    skipped_layers: tuple[str, ...] = (),
) -> ClassificationResult:
    """Create the default result returned when no tier qualifies.

    Args:
        summary: The execution summary that could not be classified
        note: Explanation shown to the reviewer
        skipped_layers: Tiers skipped because their service was unavailable

    Returns:
        ClassificationResult with metric_key unknown and zero confidence

    """
    return ClassificationResult(
        metric_key=OutcomeType.UNKNOWN,
        confidence=0.0,
        detection_layer=DetectionLayer.UNKNOWN,
        reasoning=DefaultReasoning(
            present_fields=tuple(summary.present_fields()),
            note=note,
        ),
        execution_id=summary.execution_id,
        skipped_layers=skipped_layers,
    )


def describe_skips(skipped_layers: tuple[str, ...]) -> str:
    """Note appended to the default reasoning when tiers were skipped."""
    if not skipped_layers:
        return ""
    return f" ({', '.join(skipped_layers)} unavailable)"
