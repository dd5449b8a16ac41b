"""Tiered outcome classification of workflow executions."""

import logging
import threading
from collections import OrderedDict
from collections.abc import Mapping
from dataclasses import replace
from typing import Any

from ..config import ClassifierSettings
from ..exceptions import LearningUnavailableError
from ..graph.nodes.ai_reasoning import AIReasoningTier, Completer
from ..graph.nodes.heuristic import HeuristicTier
from ..graph.nodes.vector_semantic import Embedder, VectorSemanticTier
from ..graph.workflow import ClassificationTier, create_initial_state, get_compiled_workflow
from ..models.confirmation import OutcomeConfirmation
from ..models.outcome import OutcomeType
from ..models.result import ClassificationResult
from ..models.summary import ExecutionSummary
from ..services.description_store import DescriptionStore
from .audit_manager import AuditManager
from .feedback_manager import FeedbackManager

logger = logging.getLogger(__name__)


class OutcomeClassifier:
    """Classifies executions through vector, heuristic and AI tiers in order.

    The first tier that produces a qualifying result wins. A tier whose
    service is unavailable is skipped and recorded on the result. Tiers
    whose service was not supplied are left out of the chain.
    """

    def __init__(
        self,
        store: DescriptionStore,
        embedder: Embedder | None = None,
        reasoner: Completer | None = None,
        settings: ClassifierSettings | None = None,
        audit: AuditManager | None = None,
    ) -> None:
        self.settings = settings or ClassifierSettings()
        self.store = store
        self.embedder = embedder
        self.reasoner = reasoner
        self.audit = audit or AuditManager()
        self.feedback = FeedbackManager(store, embedder)

        self.tiers = self._build_tiers()
        self.workflow = get_compiled_workflow(self.tiers)

        # Recently classified summaries, used to describe confirmations
        self._recent: OrderedDict[str, ExecutionSummary] = OrderedDict()
        self._recent_lock = threading.Lock()

    def _build_tiers(self) -> list[ClassificationTier]:
        tiers: list[ClassificationTier] = []
        if self.embedder is not None:
            tiers.append(VectorSemanticTier(
                self.embedder,
                self.store,
                threshold=self.settings.similarity_threshold,
                match_count=self.settings.vector_match_count,
            ))
        tiers.append(HeuristicTier(min_score=self.settings.heuristic_min_score))
        if self.reasoner is not None:
            tiers.append(AIReasoningTier(
                self.reasoner,
                min_confidence=self.settings.ai_min_confidence,
                model_name=self.settings.ai_model,
            ))
        logger.debug(f"Classification tiers: {[tier.layer.value for tier in tiers]}")
        return tiers

    def classify(self, summary: Mapping[str, Any],
                 company_id: str | None = None) -> ClassificationResult:
        """Classify one workflow execution.

        Args:
            summary: Flat mapping of field names to primitive values
            company_id: Tenant whose learned descriptions are also searched

        Returns:
            ClassificationResult, metric_key unknown when nothing qualified

        Raises:
            InvalidInputError: If the summary is empty, null or malformed.
                Raised before any tier runs.

        """
        execution = ExecutionSummary.from_mapping(summary)

        final_state = self.workflow.invoke(create_initial_state(execution, company_id))

        result: ClassificationResult = final_state["result"]
        skipped = final_state.get("skipped", [])
        if skipped:
            result = replace(result, skipped_layers=tuple(item["layer"] for item in skipped))
            for item in skipped:
                self.audit.log_tier_skipped(
                    item["layer"], item["reason"], execution.execution_id, company_id
                )

        self._remember(execution)
        self.audit.log_classification(result, company_id)
        logger.info(
            f"Execution {execution.execution_id or '<no id>'}: {result.metric_key.value} "
            f"via {result.detection_layer.value} ({result.confidence:.2f})"
        )
        return result

    def confirm(
        self,
        execution_id: str,
        confirmed_metric_key: OutcomeType | str,
        custom_description: str | None = None,
        company_id: str | None = None,
        summary: Mapping[str, Any] | None = None,
    ) -> OutcomeConfirmation:
        """Record a human-confirmed outcome and learn from it.

        The execution is described from the explicit summary, else the
        summary last classified under execution_id, else its id alone.

        Raises:
            InvalidInputError: If execution_id is blank or the metric key is
                not a known outcome
            LearningUnavailableError: If the confirmation was recorded but
                could not be turned into a searchable description

        """
        execution = ExecutionSummary.from_mapping(summary) if summary is not None else None
        if execution is None and isinstance(execution_id, str):
            execution = self.get_recent(execution_id.strip())

        try:
            confirmation = self.feedback.add_confirmation(
                execution_id,
                confirmed_metric_key,
                custom_description=custom_description,
                company_id=company_id,
                summary=execution,
            )
        except LearningUnavailableError as e:
            if e.confirmation is not None:
                self.audit.log_confirmation(e.confirmation)
                self.audit.log_learning_failed(e.confirmation, str(e))
            raise

        self.audit.log_confirmation(confirmation)
        return confirmation

    def get_recent(self, execution_id: str) -> ExecutionSummary | None:
        """Get the summary last classified under an execution id."""
        with self._recent_lock:
            return self._recent.get(execution_id)

    def _remember(self, execution: ExecutionSummary) -> None:
        if not execution.execution_id:
            return
        with self._recent_lock:
            self._recent[execution.execution_id] = execution
            self._recent.move_to_end(execution.execution_id)
            while len(self._recent) > self.settings.recent_execution_limit:
                self._recent.popitem(last=False)
