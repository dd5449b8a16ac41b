"""Tests for ExecutionSummary validation and rendering."""

import pytest

from outcome_classifier.exceptions import InvalidInputError
from outcome_classifier.models.summary import ExecutionSummary, is_present, normalize_field_name


class TestFromMapping:
    """Validation of raw execution metadata."""

    @pytest.mark.parametrize("data", [None, {}, [], "meeting", 42])
    def test_rejects_missing_or_non_mapping(self, data):
        with pytest.raises(InvalidInputError):
            ExecutionSummary.from_mapping(data)

    def test_rejects_nested_values(self):
        with pytest.raises(InvalidInputError, match="contact"):
            ExecutionSummary.from_mapping({"contact": {"name": "Ann"}})

    def test_rejects_non_finite_numbers(self):
        with pytest.raises(InvalidInputError):
            ExecutionSummary.from_mapping({"amount": float("nan")})

    def test_rejects_blank_field_names(self):
        with pytest.raises(InvalidInputError):
            ExecutionSummary.from_mapping({"  ": "value"})

    def test_accepts_primitives(self):
        summary = ExecutionSummary.from_mapping(
            {"name": "Ann", "count": 2, "ratio": 0.5, "ok": True, "note": None}
        )
        assert len(summary) == 5
        assert summary["name"] == "Ann"

    def test_summary_is_passed_through(self):
        summary = ExecutionSummary.from_mapping({"name": "Ann"})
        assert ExecutionSummary.from_mapping(summary) is summary


class TestFields:
    """Presence and normalization of fields."""

    def test_normalize_field_name(self):
        assert normalize_field_name(" Contact-Email ") == "contact_email"
        assert normalize_field_name("Scheduled Time") == "scheduled_time"

    def test_blank_values_are_not_present(self):
        assert not is_present(None)
        assert not is_present("   ")
        assert is_present(0)
        assert is_present(False)

    def test_present_fields_are_normalized(self):
        summary = ExecutionSummary.from_mapping({"Contact Name": "Ann", "Email": "", "Phone": None})
        assert summary.present_fields() == {"contact_name": "Ann"}

    def test_execution_id_and_workflow_name(self):
        summary = ExecutionSummary.from_mapping(
            {"execution_id": 123, "workflow_name": " Lead intake ", "email": "a@b.com"}
        )
        assert summary.execution_id == "123"
        assert summary.workflow_name == "Lead intake"
        assert summary.descriptive_fields() == {"email": "a@b.com"}


class TestRenderDescription:
    """Rendering summaries as text for embedding."""

    def test_render_leaves_out_bookkeeping_ids(self):
        first = ExecutionSummary.from_mapping(
            {"execution_id": "ex1", "workflow_name": "Retainer pipeline", "client": "Acme"}
        )
        second = ExecutionSummary.from_mapping(
            {"execution_id": "ex2", "workflow_name": "Retainer pipeline", "client": "Acme"}
        )
        assert first.render_description() == second.render_description()
        assert first.render_description() == "Workflow: Retainer pipeline. Data: client: Acme"

    def test_render_booleans(self):
        summary = ExecutionSummary.from_mapping({"sent": True})
        assert summary.render_description() == "Data: sent: yes"

    def test_render_with_only_ids(self):
        summary = ExecutionSummary.from_mapping({"execution_id": "ex1"})
        assert summary.render_description() == "execution_id: ex1"
