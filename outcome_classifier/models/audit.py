"""Audit trail data models for outcome classification.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class AuditEntry:
    """Represents a single audit log entry."""

    timestamp: datetime = field(default_factory=datetime.now)
    company_id: str | None = None
    execution_id: str | None = None
    event_type: str = ""  # "classify", "skip", "confirm", "learn_failed"
    details: str = ""
    metric_key: str | None = None
    detection_layer: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for CSV export.

        Returns:
            Dictionary with all fields formatted for export

        """
        return {
            'timestamp': self.timestamp.strftime('%Y-%m-%d %H:%M:%S'),
            'company_id': self.company_id or '',
            'execution_id': self.execution_id or '',
            'event': self.event_type,
            'details': self.details,
            'metric_key': self.metric_key or '',
            'detection_layer': self.detection_layer or ''
        }
