"""Tests for compiling tiers into the LangGraph workflow."""

import pytest

from outcome_classifier.exceptions import ExternalServiceUnavailableError
from outcome_classifier.graph.workflow import create_initial_state, get_compiled_workflow
from outcome_classifier.models.outcome import DetectionLayer, OutcomeType
from outcome_classifier.models.result import AIReasoning, ClassificationResult
from outcome_classifier.models.summary import ExecutionSummary


class ScriptedTier:
    """Tier that returns a fixed answer and records whether it ran."""

    def __init__(self, layer, metric_key=None, error=None):
        self.layer = layer
        self.metric_key = metric_key
        self.error = error
        self.calls = 0

    def attempt(self, summary, company_id=None):
        self.calls += 1
        if self.error is not None:
            raise self.error
        if self.metric_key is None:
            return None
        return ClassificationResult(
            metric_key=self.metric_key,
            confidence=0.9,
            detection_layer=self.layer,
            reasoning=AIReasoning("scripted"),
        )


@pytest.fixture
def state():
    return create_initial_state(ExecutionSummary.from_mapping({"workflow_name": "Test"}), None)


class TestWorkflow:

    def test_first_result_ends_the_run(self, state):
        first = ScriptedTier(DetectionLayer.VECTOR_SEMANTIC)
        second = ScriptedTier(DetectionLayer.HEURISTIC, OutcomeType.LEAD_CREATED)
        third = ScriptedTier(DetectionLayer.AI, OutcomeType.DEAL_WON)

        final = get_compiled_workflow([first, second, third]).invoke(state)

        assert final["result"].metric_key is OutcomeType.LEAD_CREATED
        assert (first.calls, second.calls, third.calls) == (1, 1, 0)

    def test_no_result_reaches_default(self, state):
        tiers = [ScriptedTier(DetectionLayer.HEURISTIC), ScriptedTier(DetectionLayer.AI)]

        final = get_compiled_workflow(tiers).invoke(state)

        assert final["result"].metric_key is OutcomeType.UNKNOWN
        assert final["result"].detection_layer is DetectionLayer.UNKNOWN

    def test_unavailable_tier_is_skipped(self, state):
        tiers = [
            ScriptedTier(DetectionLayer.VECTOR_SEMANTIC, error=ExternalServiceUnavailableError("down")),
            ScriptedTier(DetectionLayer.HEURISTIC, OutcomeType.MEETING_BOOKED),
        ]

        final = get_compiled_workflow(tiers).invoke(state)

        assert final["result"].metric_key is OutcomeType.MEETING_BOOKED
        assert final["skipped"] == [{"layer": "vector_semantic", "reason": "down"}]

    def test_unexpected_errors_also_skip_the_tier(self, state):
        tiers = [
            ScriptedTier(DetectionLayer.VECTOR_SEMANTIC, error=TimeoutError("read timed out")),
            ScriptedTier(DetectionLayer.HEURISTIC, OutcomeType.MEETING_BOOKED),
        ]

        final = get_compiled_workflow(tiers).invoke(state)

        assert final["result"].metric_key is OutcomeType.MEETING_BOOKED
        assert final["skipped"] == [
            {"layer": "vector_semantic", "reason": "TimeoutError: read timed out"}
        ]

    def test_empty_tier_list_goes_straight_to_default(self, state):
        final = get_compiled_workflow([]).invoke(state)
        assert final["result"].is_unknown

    def test_duplicate_layers_are_rejected(self):
        with pytest.raises(ValueError):
            get_compiled_workflow([
                ScriptedTier(DetectionLayer.AI), ScriptedTier(DetectionLayer.AI)
            ])
