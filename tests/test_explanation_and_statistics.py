"""Tests for review messages and batch statistics."""

from outcome_classifier.models.description import Language
from outcome_classifier.models.outcome import DetectionLayer, OutcomeType
from outcome_classifier.models.result import (
    AIReasoning,
    ClassificationResult,
    DefaultReasoning,
    HeuristicReasoning,
    VectorMatchReasoning,
)
from outcome_classifier.utils.explanation import metric_label, render_explanation
from outcome_classifier.utils.statistics import calculate_classification_statistics


def vector_result():
    return ClassificationResult(
        metric_key=OutcomeType.DEAL_WON,
        confidence=0.87,
        detection_layer=DetectionLayer.VECTOR_SEMANTIC,
        reasoning=VectorMatchReasoning("sale completed", "d1", 0.87),
    )


def heuristic_result():
    return ClassificationResult(
        metric_key=OutcomeType.LEAD_CREATED,
        confidence=2 / 3,
        detection_layer=DetectionLayer.HEURISTIC,
        reasoning=HeuristicReasoning(
            expected_fields=("contact_email", "contact_name", "contact_phone"),
            found_fields=("contact_email", "contact_name"),
            missing_fields=("contact_phone",),
        ),
    )


def unknown_result():
    return ClassificationResult(
        metric_key=OutcomeType.UNKNOWN,
        confidence=0.0,
        detection_layer=DetectionLayer.UNKNOWN,
        reasoning=DefaultReasoning(present_fields=("rows",)),
        skipped_layers=("ai",),
    )


class TestMetricLabel:

    def test_known_keys(self):
        assert metric_label(OutcomeType.DEAL_WON) == "Deal Won"
        assert metric_label("meeting_booked") == "Meeting Booked"
        assert metric_label("unknown") == "Unknown Activity"

    def test_unrecognised_key_is_title_cased(self):
        assert metric_label("refund_issued") == "Refund Issued"


class TestRenderExplanation:

    def test_vector_match(self):
        message = render_explanation(vector_result())
        assert message == 'Found semantic match to "sale completed" (87% similarity). Suggested: Deal Won.'

    def test_vector_match_in_chinese(self):
        message = render_explanation(vector_result(), Language.ZH)
        assert message == "與「sale completed」語義相似（87%）。建議：Deal Won。"

    def test_heuristic(self):
        message = render_explanation(heuristic_result())
        assert "Confidence 67%" in message
        assert "found [contact_email, contact_name]" in message
        assert "Missing: contact_phone" in message

    def test_ai(self):
        result = ClassificationResult(
            metric_key=OutcomeType.EMAIL_SENT,
            confidence=0.7,
            detection_layer=DetectionLayer.AI,
            reasoning=AIReasoning("digest mailed to subscribers"),
        )
        assert render_explanation(result) == (
            "AI analysis suggests this could be Email Sent (70% confidence) "
            "because: digest mailed to subscribers"
        )

    def test_unknown_lists_known_outcomes_and_skips(self):
        message = render_explanation(unknown_result())
        assert message.startswith("Couldn't determine an outcome (0% confidence).")
        assert "Data fields seen: rows" in message
        assert "Skipped tiers: ai" in message
        assert "Meeting Booked" in message and "Deal Won" in message


class TestClassificationStatistics:

    def test_empty(self):
        stats = calculate_classification_statistics([])
        assert stats.total == 0
        assert stats.classified_rate == 0.0

    def test_counts(self):
        stats = calculate_classification_statistics(
            [vector_result(), heuristic_result(), unknown_result(), vector_result()]
        )

        assert stats.total == 4
        assert stats.by_outcome == {"lead_created": 1, "deal_won": 2, "unknown": 1}
        assert stats.by_layer == {"vector_semantic": 2, "heuristic": 1, "unknown": 1}
        assert stats.unknown == 1
        assert stats.classified_rate == 75.0
        assert stats.skipped_tiers == 1
        assert abs(stats.mean_confidence - (0.87 * 2 + 2 / 3) / 4) < 1e-9
        assert "Total: 4" in stats.to_display_string()
