"""Outcome and detection layer enums for workflow classification."""

from enum import Enum


class OutcomeType(str, Enum):
    """Canonical business outcomes of a workflow execution.

    Declaration order is the heuristic tie-break priority: when two outcomes
    score the same, the one declared first wins.
    """

    MEETING_BOOKED = "meeting_booked"
    LEAD_CREATED = "lead_created"
    TICKET_CREATED = "ticket_created"
    TICKET_RESOLVED = "ticket_resolved"
    EMAIL_SENT = "email_sent"
    DEAL_WON = "deal_won"
    UNKNOWN = "unknown"

    @property
    def display_name(self) -> str:
        """Get human-readable display name."""
        return self.value.replace("_", " ").title()

    @classmethod
    def from_string(cls, value: object) -> "OutcomeType | None":
        """Create OutcomeType from string value, None when not in the enumeration."""
        if not isinstance(value, str) or not value.strip():
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None

    @classmethod
    def known(cls) -> tuple["OutcomeType", ...]:
        """All outcomes except UNKNOWN, in priority order."""
        return tuple(outcome for outcome in cls if outcome is not cls.UNKNOWN)


class DetectionLayer(str, Enum):
    """Which tier of the fallback chain produced a classification."""

    VECTOR_SEMANTIC = "vector_semantic"
    HEURISTIC = "heuristic"
    AI = "ai"
    UNKNOWN = "unknown"
