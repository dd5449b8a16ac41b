"""Audit manager for logging and tracking all classification activities.
"""
import csv
import threading
from pathlib import Path

from ..models.audit import AuditEntry
from ..models.confirmation import OutcomeConfirmation
from ..models.result import ClassificationResult


class AuditManager:
    """Manages audit trail logging and export."""

    def __init__(self):
        """Initialize empty audit log."""
        self._entries: list[AuditEntry] = []
        self._lock = threading.Lock()

    def _append(self, entry: AuditEntry) -> None:
        with self._lock:
            self._entries.append(entry)

    def log_classification(self, result: ClassificationResult,
                           company_id: str | None = None) -> None:
        """Log a classification event.

        Args:
            result: The classification result
            company_id: The tenant the execution belongs to

        """
        details = f"Classified via {result.detection_layer.value} - Confidence: {result.confidence:.2f}"
        if result.skipped_layers:
            details += f" (skipped: {', '.join(result.skipped_layers)})"

        self._append(AuditEntry(
            company_id=company_id,
            execution_id=result.execution_id,
            event_type="classify",
            details=details,
            metric_key=result.metric_key.value,
            detection_layer=result.detection_layer.value
        ))

    def log_tier_skipped(self, layer: str, reason: str, execution_id: str | None,
                         company_id: str | None = None) -> None:
        """Log a tier skipped because its service was unavailable.

        Args:
            layer: The skipped detection layer
            reason: Why the service failed
            execution_id: The execution being classified
            company_id: The tenant the execution belongs to

        """
        self._append(AuditEntry(
            company_id=company_id,
            execution_id=execution_id,
            event_type="skip",
            details=f"Tier skipped: {reason}",
            detection_layer=layer
        ))

    def log_confirmation(self, confirmation: OutcomeConfirmation) -> None:
        """Log a human confirmation.

        Args:
            confirmation: The recorded confirmation

        """
        details = "User Confirmation"
        if confirmation.learned_description_id:
            details += f" - Learned description {confirmation.learned_description_id}"

        self._append(AuditEntry(
            company_id=confirmation.company_id,
            execution_id=confirmation.execution_id,
            event_type="confirm",
            details=details,
            metric_key=confirmation.metric_key.value
        ))

    def log_learning_failed(self, confirmation: OutcomeConfirmation, error_message: str) -> None:
        """Log a confirmation that was recorded but could not be embedded.

        Args:
            confirmation: The recorded confirmation
            error_message: The error message

        """
        self._append(AuditEntry(
            company_id=confirmation.company_id,
            execution_id=confirmation.execution_id,
            event_type="learn_failed",
            details=f"Error: {error_message}",
            metric_key=confirmation.metric_key.value
        ))

    def get_entries(self, company_id: str | None = None,
                    event_type: str | None = None) -> list[AuditEntry]:
        """Get audit entries with optional filtering.

        Args:
            company_id: Filter by company ID (optional)
            event_type: Filter by event type (optional)

        Returns:
            List of matching audit entries

        """
        with self._lock:
            entries = list(self._entries)

        # Filter by company ID if provided
        if company_id:
            entries = [e for e in entries if e.company_id == company_id]

        # Filter by event type if provided
        if event_type:
            entries = [e for e in entries if e.event_type == event_type]

        return entries

    def export_csv(self, filepath: Path) -> None:
        """Export all audit entries to CSV file.

        Args:
            filepath: Path to save the CSV file

        """
        # Sort entries chronologically
        entries = sorted(self.get_entries(), key=lambda e: e.timestamp)

        # Write to CSV
        with open(filepath, 'w', newline='', encoding='utf-8') as f:
            fieldnames = ['timestamp', 'company_id', 'execution_id',
                          'event', 'details', 'metric_key', 'detection_layer']
            writer = csv.DictWriter(f, fieldnames=fieldnames)

            # Write header
            writer.writeheader()

            # Write entries
            for entry in entries:
                writer.writerow(entry.to_dict())

    def get_entry_count(self) -> int:
        """Get total number of audit entries.

        Returns:
            Number of audit entries

        """
        with self._lock:
            return len(self._entries)
