from typing import TypedDict

from ..models.result import ClassificationResult
from ..models.summary import ExecutionSummary


class SkippedTier(TypedDict):
    """A tier that could not run because its external service failed."""

    layer: str
    reason: str


class ClassificationState(TypedDict):
    """State that flows through the LangGraph classification workflow."""

    # Input fields
    summary: ExecutionSummary
    company_id: str | None

    # Set by the first tier that qualifies, or by the default node
    result: ClassificationResult | None

    # Tiers skipped on service failure, in the order they ran
    skipped: list[SkippedTier]
