"""Tests for the AuditManager class."""

import csv

import pytest

from outcome_classifier.models.confirmation import OutcomeConfirmation
from outcome_classifier.models.outcome import DetectionLayer, OutcomeType
from outcome_classifier.models.result import ClassificationResult, HeuristicReasoning
from outcome_classifier.processing.audit_manager import AuditManager


@pytest.fixture
def audit_manager():
    """Create an AuditManager instance for testing."""
    return AuditManager()


@pytest.fixture
def result():
    return ClassificationResult(
        metric_key=OutcomeType.TICKET_CREATED,
        confidence=1.0,
        detection_layer=DetectionLayer.HEURISTIC,
        reasoning=HeuristicReasoning(("ticket_id",), ("ticket_id",), ()),
        execution_id="ex1",
        skipped_layers=("vector_semantic",),
    )


class TestAuditManager:

    def test_log_classification(self, audit_manager, result):
        audit_manager.log_classification(result, company_id="acme")

        entry = audit_manager.get_entries()[0]
        assert entry.event_type == "classify"
        assert entry.execution_id == "ex1"
        assert entry.metric_key == "ticket_created"
        assert "skipped: vector_semantic" in entry.details

    def test_filtering(self, audit_manager, result):
        confirmation = OutcomeConfirmation("ex1", OutcomeType.DEAL_WON, company_id="globex")
        audit_manager.log_classification(result, company_id="acme")
        audit_manager.log_tier_skipped("ai", "timeout", "ex1", company_id="acme")
        audit_manager.log_confirmation(confirmation)
        audit_manager.log_learning_failed(confirmation, "embedding service timed out")

        assert audit_manager.get_entry_count() == 4
        assert len(audit_manager.get_entries(company_id="acme")) == 2
        assert len(audit_manager.get_entries(event_type="skip")) == 1
        assert [e.event_type for e in audit_manager.get_entries(company_id="globex")] == [
            "confirm", "learn_failed"
        ]

    def test_export_csv(self, audit_manager, result, tmp_path):
        audit_manager.log_classification(result, company_id="acme")
        audit_manager.log_tier_skipped("vector_semantic", "timeout", "ex1", company_id="acme")
        path = tmp_path / "audit.csv"

        audit_manager.export_csv(path)

        with open(path, newline="", encoding="utf-8") as f:
            rows = list(csv.DictReader(f))
        assert len(rows) == 2
        assert rows[0]["company_id"] == "acme"
        assert {row["event"] for row in rows} == {"classify", "skip"}
        assert rows[0].keys() == {
            "timestamp", "company_id", "execution_id", "event",
            "details", "metric_key", "detection_layer",
        }
