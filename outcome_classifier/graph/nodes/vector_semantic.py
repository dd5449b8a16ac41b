"""Vector-semantic tier: match the execution against learned outcome descriptions."""

import logging
from typing import Protocol

from ...exceptions import ExternalServiceUnavailableError, InvalidInputError
from ...models.outcome import DetectionLayer
from ...models.result import ClassificationResult, VectorMatchReasoning
from ...models.summary import ExecutionSummary
from ...services.description_store import DescriptionStore

logger = logging.getLogger(__name__)


class Embedder(Protocol):
    """Anything that turns text into a fixed-length vector."""

    def embed(self, text: str) -> list[float]: ...


class VectorSemanticTier:
    """First tier: nearest stored description by cosine similarity."""

    layer = DetectionLayer.VECTOR_SEMANTIC

    def __init__(self, embedder: Embedder, store: DescriptionStore,
                 threshold: float, match_count: int = 3) -> None:
        self.embedder = embedder
        self.store = store
        self.threshold = threshold
        self.match_count = match_count

    def attempt(self, summary: ExecutionSummary,
                company_id: str | None = None) -> ClassificationResult | None:
        description = summary.render_description()
        logger.debug(f"Execution description for embedding: {description[:200]}")

        try:
            embedding = self.embedder.embed(description)
        except ExternalServiceUnavailableError:
            raise
        except Exception as e:
            # Embedders are pluggable, so any failure counts as an outage
            raise ExternalServiceUnavailableError(
                f"Embedding failed: {type(e).__name__}: {e!s}"
            ) from e

        try:
            matches = self.store.search(embedding, company_id=company_id, limit=self.match_count)
        except InvalidInputError as e:
            # A vector the store cannot compare means the embedding service misbehaved
            raise ExternalServiceUnavailableError(f"Vector search failed: {e!s}") from e

        if not matches:
            logger.debug("No stored descriptions to compare against")
            return None

        best, similarity = matches[0]
        if similarity < self.threshold:
            logger.debug(
                f"Best vector match {best.metric_key.value} at {similarity:.2f} "
                f"is below {self.threshold:.2f}"
            )
            return None

        self.store.record_usage(best.id, similarity)
        logger.info(f"Vector match: {best.metric_key.value} (similarity: {similarity:.2f})")

        return ClassificationResult(
            metric_key=best.metric_key,
            confidence=min(1.0, max(0.0, similarity)),
            detection_layer=self.layer,
            reasoning=VectorMatchReasoning(
                matched_description=best.description,
                matched_description_id=best.id,
                similarity=similarity,
                rendered_summary=description,
            ),
            execution_id=summary.execution_id,
        )
