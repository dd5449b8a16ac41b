"""Confirmation data models for learning from user corrections."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .outcome import OutcomeType


@dataclass
class OutcomeConfirmation:
    """A human's confirmed outcome for one workflow execution."""

    execution_id: str
    metric_key: OutcomeType
    company_id: str | None = None
    timestamp: datetime = field(default_factory=datetime.now)

    # Optional free text explaining what the workflow does
    custom_description: str = ""

    # Filled in once the description has been embedded and stored
    learned_description_id: str | None = None

    @property
    def is_learned(self) -> bool:
        return self.learned_description_id is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert confirmation to dictionary for serialization."""
        return {
            "execution_id": self.execution_id,
            "metric_key": self.metric_key.value,
            "company_id": self.company_id,
            "timestamp": self.timestamp.isoformat(),
            "custom_description": self.custom_description,
            "learned_description_id": self.learned_description_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OutcomeConfirmation":
        """Create confirmation from dictionary."""
        return cls(
            execution_id=data["execution_id"],
            metric_key=OutcomeType(data["metric_key"]),
            company_id=data.get("company_id"),
            timestamp=datetime.fromisoformat(data["timestamp"]),
            custom_description=data.get("custom_description", ""),
            learned_description_id=data.get("learned_description_id"),
        )
