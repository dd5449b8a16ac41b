"""Shared fixtures for the outcome classifier tests."""

import pytest
from fakes import TEST_DIMENSION, FakeCompleter, VocabularyEmbedder

from outcome_classifier.services.description_store import DescriptionStore


@pytest.fixture
def embedder():
    """Create a vocabulary embedder for testing."""
    return VocabularyEmbedder()


@pytest.fixture
def store():
    """Create an empty description store matching the test embedder."""
    return DescriptionStore(dimension=TEST_DIMENSION)


@pytest.fixture
def unknown_completer():
    """AI service that never recognises anything."""
    return FakeCompleter()


@pytest.fixture
def meeting_summary():
    """Summary with every field a booked meeting is expected to have."""
    return {
        "execution_id": "exec-meeting-1",
        "workflow_name": "Viewing scheduler",
        "scheduled_time": "2024-05-01T10:00:00",
        "contact_email": "ann@example.com",
        "contact_name": "Ann Lee",
    }
