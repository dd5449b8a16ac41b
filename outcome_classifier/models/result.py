"""Classification result and the reasoning payloads behind it."""

from dataclasses import asdict, dataclass, field
from typing import Any

from .outcome import DetectionLayer, OutcomeType


@dataclass(frozen=True)
class VectorMatchReasoning:
    """Nearest stored description that matched the execution."""

    matched_description: str
    matched_description_id: str
    similarity: float
    rendered_summary: str = ""


@dataclass(frozen=True)
class HeuristicReasoning:
    """Expected versus found fields for the winning outcome."""

    expected_fields: tuple[str, ...]
    found_fields: tuple[str, ...]
    missing_fields: tuple[str, ...]


@dataclass(frozen=True)
class AIReasoning:
    """Free-text rationale returned by the AI service."""

    rationale: str
    model: str | None = None


@dataclass(frozen=True)
class DefaultReasoning:
    """Fields that were present when no tier matched."""

    present_fields: tuple[str, ...]
    note: str = "No known outcome pattern matched"


Reasoning = VectorMatchReasoning | HeuristicReasoning | AIReasoning | DefaultReasoning


@dataclass(frozen=True)
class ClassificationResult:
    """Outcome of classifying one workflow execution."""

    metric_key: OutcomeType
    confidence: float
    detection_layer: DetectionLayer
    reasoning: Reasoning
    execution_id: str | None = None
    skipped_layers: tuple[str, ...] = field(default=())

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be within [0, 1], got {self.confidence}")

    @property
    def is_unknown(self) -> bool:
        return self.metric_key is OutcomeType.UNKNOWN

    def to_dict(self) -> dict[str, Any]:
        """Convert result to dictionary for the caller to persist."""
        return {
            "metric_key": self.metric_key.value,
            "confidence": self.confidence,
            "detection_layer": self.detection_layer.value,
            "reasoning": {"type": type(self.reasoning).__name__, **asdict(self.reasoning)},
            "execution_id": self.execution_id,
            "skipped_layers": list(self.skipped_layers),
        }
