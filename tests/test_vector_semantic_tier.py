"""Tests for the vector-semantic tier."""

import math

import pytest

from outcome_classifier.exceptions import ExternalServiceUnavailableError
from outcome_classifier.graph.nodes.vector_semantic import VectorSemanticTier
from outcome_classifier.models.description import OutcomeDescription
from outcome_classifier.models.outcome import DetectionLayer, OutcomeType
from outcome_classifier.models.result import VectorMatchReasoning
from outcome_classifier.models.summary import ExecutionSummary
from outcome_classifier.services.description_store import DescriptionStore

from fakes import FailingEmbedder, RaisingEmbedder, StaticEmbedder


def unit_at(similarity):
    """Two-dimensional unit vector whose cosine with (1, 0) is the given value."""
    return (similarity, math.sqrt(1 - similarity ** 2))


@pytest.fixture
def small_store():
    """Create a two-dimensional store holding one deal_won description."""
    store = DescriptionStore(dimension=2)
    store.add(OutcomeDescription(
        metric_key=OutcomeType.DEAL_WON,
        description="sale completed",
        embedding=unit_at(0.9),
    ))
    return store


@pytest.fixture
def summary():
    return ExecutionSummary.from_mapping({"execution_id": "ex1", "workflow_name": "Close deals"})


class TestVectorSemanticTier:
    """Threshold checks and reasoning."""

    def test_match_above_threshold(self, small_store, summary):
        tier = VectorSemanticTier(StaticEmbedder([1.0, 0.0]), small_store, threshold=0.8)

        result = tier.attempt(summary)

        assert result.metric_key is OutcomeType.DEAL_WON
        assert result.detection_layer is DetectionLayer.VECTOR_SEMANTIC
        assert result.confidence == pytest.approx(0.9)
        assert result.execution_id == "ex1"
        assert isinstance(result.reasoning, VectorMatchReasoning)
        assert result.reasoning.matched_description == "sale completed"
        assert result.reasoning.rendered_summary == "Workflow: Close deals"

    def test_match_records_usage(self, small_store, summary):
        tier = VectorSemanticTier(StaticEmbedder([1.0, 0.0]), small_store, threshold=0.8)

        result = tier.attempt(summary)

        stats = small_store.get_usage(result.reasoning.matched_description_id)
        assert stats.usage_count == 1

    def test_below_threshold_returns_none(self, small_store, summary):
        tier = VectorSemanticTier(StaticEmbedder([1.0, 0.0]), small_store, threshold=0.95)
        assert tier.attempt(summary) is None

    def test_empty_store_returns_none(self, summary):
        tier = VectorSemanticTier(StaticEmbedder([1.0, 0.0]), DescriptionStore(dimension=2), 0.8)
        assert tier.attempt(summary) is None

    def test_other_company_descriptions_are_ignored(self, summary):
        store = DescriptionStore(dimension=2)
        store.add(OutcomeDescription(
            metric_key=OutcomeType.LEAD_CREATED,
            description="acme lead form",
            embedding=(1.0, 0.0),
            company_id="acme",
        ))
        tier = VectorSemanticTier(StaticEmbedder([1.0, 0.0]), store, threshold=0.8)

        assert tier.attempt(summary, company_id="other") is None
        assert tier.attempt(summary, company_id="acme").metric_key is OutcomeType.LEAD_CREATED

    def test_embedding_failure_propagates(self, small_store, summary):
        tier = VectorSemanticTier(FailingEmbedder(), small_store, threshold=0.8)
        with pytest.raises(ExternalServiceUnavailableError):
            tier.attempt(summary)

    def test_raw_client_errors_become_service_failures(self, small_store, summary):
        tier = VectorSemanticTier(
            RaisingEmbedder(ConnectionError("connection reset")), small_store, threshold=0.8
        )
        with pytest.raises(ExternalServiceUnavailableError, match="ConnectionError"):
            tier.attempt(summary)

    def test_nan_embedding_is_a_service_failure(self, small_store, summary):
        tier = VectorSemanticTier(StaticEmbedder([math.nan, 0.0]), small_store, threshold=0.8)
        with pytest.raises(ExternalServiceUnavailableError):
            tier.attempt(summary)

    def test_wrong_dimension_is_a_service_failure(self, small_store, summary):
        tier = VectorSemanticTier(StaticEmbedder([1.0, 0.0, 0.0]), small_store, threshold=0.8)
        with pytest.raises(ExternalServiceUnavailableError):
            tier.attempt(summary)
