"""Manages human confirmations for teaching the classifier new descriptions."""

import json
import logging
import threading
from collections import defaultdict
from pathlib import Path
from typing import Any, Protocol

from ..exceptions import ExternalServiceUnavailableError, InvalidInputError, LearningUnavailableError
from ..models.confirmation import OutcomeConfirmation
from ..models.description import DescriptionSource, OutcomeDescription, detect_language
from ..models.outcome import OutcomeType
from ..models.summary import ExecutionSummary
from ..services.description_store import DescriptionStore

logger = logging.getLogger(__name__)


class Embedder(Protocol):
    def embed(self, text: str) -> list[float]: ...


def build_confirmation_text(execution_id: str, summary: ExecutionSummary | None,
                            custom_description: str | None = None) -> str:
    """Describe a confirmed execution in the same shape classify() embeds.

    Args:
        execution_id: The confirmed execution
        summary: Its summary when known
        custom_description: Free text from the reviewer

    Returns:
        Text to embed as a new outcome description

    """
    base = summary.render_description() if summary is not None else f"Execution {execution_id}"
    extra = (custom_description or "").strip()
    return f"{base}. {extra}" if extra else base


class FeedbackManager:
    """Records confirmations and turns them into learned descriptions.

    Confirmations are append-only. A confirmation is stored before any
    embedding is attempted, so the reviewer's choice survives an outage.
    """

    def __init__(self, store: DescriptionStore, embedder: Embedder | None = None) -> None:
        self.store = store
        self.embedder = embedder
        self._lock = threading.Lock()
        # Store confirmations by company_id; None holds global confirmations
        self._confirmations: dict[str | None, list[OutcomeConfirmation]] = defaultdict(list)

    def add_confirmation(
        self,
        execution_id: str,
        confirmed_metric_key: OutcomeType | str,
        custom_description: str | None = None,
        company_id: str | None = None,
        summary: ExecutionSummary | None = None,
    ) -> OutcomeConfirmation:
        """Record a human-confirmed outcome and learn a description from it.

        Args:
            execution_id: The execution being confirmed
            confirmed_metric_key: The outcome the reviewer chose
            custom_description: Optional free text explaining the workflow
            company_id: Tenant the learned description belongs to
            summary: The execution's summary, if known

        Returns:
            The recorded confirmation, with learned_description_id set

        Raises:
            InvalidInputError: If the execution id is blank or the metric key
                is not a known outcome
            LearningUnavailableError: If the confirmation was recorded but the
                description could not be embedded

        """
        if not isinstance(execution_id, str) or not execution_id.strip():
            raise InvalidInputError("execution_id is required")

        metric_key = OutcomeType.from_string(confirmed_metric_key)
        if metric_key is None or metric_key is OutcomeType.UNKNOWN:
            raise InvalidInputError(
                f"{confirmed_metric_key!r} is not a known outcome; "
                f"expected one of {', '.join(o.value for o in OutcomeType.known())}"
            )

        if custom_description is not None and not isinstance(custom_description, str):
            raise InvalidInputError("custom_description must be text")

        execution_id = execution_id.strip()
        confirmation = OutcomeConfirmation(
            execution_id=execution_id,
            metric_key=metric_key,
            company_id=company_id,
            custom_description=(custom_description or "").strip(),
        )
        with self._lock:
            self._confirmations[company_id].append(confirmation)
        logger.info(f"Recorded confirmation for {execution_id}: {metric_key.value}")

        text = build_confirmation_text(execution_id, summary, custom_description)
        if self.embedder is None:
            raise LearningUnavailableError(
                "No embedding service configured; confirmation recorded without learning",
                confirmation=confirmation,
            )

        try:
            embedding = self.embedder.embed(text)
            description = self.store.add(
                OutcomeDescription(
                    metric_key=metric_key,
                    description=text,
                    embedding=tuple(float(x) for x in embedding),
                    source=DescriptionSource.USER_CONFIRMED,
                    language=detect_language(text),
                    company_id=company_id,
                )
            )
        except (ExternalServiceUnavailableError, InvalidInputError) as e:
            logger.warning(f"Could not learn from confirmation of {execution_id}: {e!s}")
            raise LearningUnavailableError(
                f"Confirmation recorded but not learned: {e!s}", confirmation=confirmation
            ) from e

        with self._lock:
            confirmation.learned_description_id = description.id
        logger.info(f"Learned description {description.id} for {metric_key.value}")
        return confirmation

    def get_confirmations(self, company_id: str | None = None) -> list[OutcomeConfirmation]:
        """Get all confirmations for a company.

        Args:
            company_id: Tenant to look up; None returns confirmations made
                without a company

        Returns:
            Confirmations in the order they were recorded

        """
        with self._lock:
            return list(self._confirmations.get(company_id, []))

    def get_statistics(self, company_id: str | None = None) -> dict[str, Any]:
        """Get confirmation statistics for a company.

        Returns:
            Dictionary with totals, counts per outcome and how many were learned

        """
        confirmations = self.get_confirmations(company_id)

        if not confirmations:
            return {
                "total_confirmations": 0,
                "learned": 0,
                "most_confirmed_outcome": "N/A",
            }

        counts: dict[str, int] = defaultdict(int)
        for c in confirmations:
            counts[c.metric_key.value] += 1

        most_common = max(counts.items(), key=lambda x: x[1])

        return {
            "total_confirmations": len(confirmations),
            "learned": sum(1 for c in confirmations if c.is_learned),
            "most_confirmed_outcome": most_common[0],
            "outcome_counts": dict(counts),
        }

    def has_confirmations(self, company_id: str | None = None) -> bool:
        """Check if a company has any confirmations."""
        with self._lock:
            return len(self._confirmations.get(company_id, [])) > 0

    def to_dict(self) -> dict[str, Any]:
        """Convert all recorded confirmations to a dictionary for serialization."""
        with self._lock:
            confirmations = [c for entries in self._confirmations.values() for c in entries]
        confirmations.sort(key=lambda c: c.timestamp)
        return {"confirmations": [c.to_dict() for c in confirmations]}

    def load_confirmations(self, data: dict[str, Any]) -> int:
        """Append confirmations read back from to_dict() output.

        Returns:
            Number of confirmations loaded

        """
        confirmations = [OutcomeConfirmation.from_dict(item) for item in data.get("confirmations", [])]
        with self._lock:
            for confirmation in confirmations:
                self._confirmations[confirmation.company_id].append(confirmation)
        return len(confirmations)

    def save(self, path: Path) -> None:
        """Write the recorded confirmations to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        data = self.to_dict()
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        logger.info(f"Saved {len(data['confirmations'])} confirmations to {path}")

    def load(self, path: Path) -> int:
        """Read confirmations from a JSON file written by save(), if it exists."""
        path = Path(path)
        if not path.exists():
            logger.info(f"No confirmations file at {path}, starting empty")
            return 0
        try:
            with open(path, encoding="utf-8") as f:
                count = self.load_confirmations(json.load(f))
        except (KeyError, ValueError) as e:
            raise InvalidInputError(f"Could not read confirmations from {path}: {e!s}") from e
        logger.info(f"Loaded {count} confirmations from {path}")
        return count
