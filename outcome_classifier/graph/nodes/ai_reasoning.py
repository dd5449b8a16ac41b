"""AI tier: ask a language model for a best guess when nothing else matched."""

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from ...constants import OUTCOME_DEFINITIONS
from ...exceptions import AIResponseMalformedError, ExternalServiceUnavailableError
from ...models.outcome import DetectionLayer, OutcomeType
from ...models.result import AIReasoning, ClassificationResult
from ...models.summary import ExecutionSummary

logger = logging.getLogger(__name__)


class Completer(Protocol):
    """Anything that answers a classification prompt with a JSON object."""

    def complete(self, system_prompt: str, payload: Mapping[str, Any]) -> Mapping[str, Any]: ...


def build_system_prompt(min_confidence: float) -> str:
    """System prompt listing the closed set of outcomes with short definitions."""
    definitions = "\n".join(
        f"- {outcome.value}: {OUTCOME_DEFINITIONS[outcome]}" for outcome in OutcomeType
    )
    return f"""You are an expert workflow analyzer for a business CRM.
Analyze automation workflow executions and determine the business outcome they achieved.

## CORE PRINCIPLES
1. Evidence-based: only classify from the concrete fields you are given
2. Express uncertainty: return "unknown" if confidence < {min_confidence:.1f}
3. Field names and values may be English or Traditional Chinese

## ALLOWED METRIC KEYS
{definitions}

## OUTPUT FORMAT
Respond with a JSON object containing exactly these fields:
{{
    "metric_key": "<one of the allowed metric keys>",
    "confidence": <0.0-1.0>,
    "reasoning": "<single sentence>"
}}"""


@dataclass(frozen=True)
class AIVerdict:
    """AI output after clamping to the closed enumeration."""

    metric_key: OutcomeType
    confidence: float
    reasoning: str
    problems: tuple[str, ...] = ()


def normalize_ai_output(raw: Any) -> AIVerdict:
    """Treat the model output as untrusted and clamp it.

    A metric key outside the enumeration becomes unknown with confidence 0.
    A missing, non-numeric or out-of-range confidence becomes 0.
    """
    problems = []
    if not isinstance(raw, Mapping):
        return AIVerdict(OutcomeType.UNKNOWN, 0.0, "", (f"response was {type(raw).__name__}",))

    metric_key = OutcomeType.from_string(raw.get("metric_key"))
    key_rejected = metric_key is None
    if key_rejected:
        problems.append(f"metric_key {raw.get('metric_key')!r} is not an allowed outcome")
        metric_key = OutcomeType.UNKNOWN

    confidence = raw.get("confidence")
    if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
        problems.append(f"confidence {confidence!r} is not a number")
        confidence = 0.0
    elif not math.isfinite(confidence) or not 0.0 <= confidence <= 1.0:
        problems.append(f"confidence {confidence!r} is out of range")
        confidence = 0.0

    if key_rejected:
        confidence = 0.0

    reasoning = raw.get("reasoning")
    if not isinstance(reasoning, str):
        reasoning = ""

    return AIVerdict(metric_key, float(confidence), reasoning.strip(), tuple(problems))


class AIReasoningTier:
    """Third tier: opaque LLM reasoning over the execution summary."""

    layer = DetectionLayer.AI

    def __init__(self, completer: Completer, min_confidence: float,
                 model_name: str | None = None) -> None:
        self.completer = completer
        self.min_confidence = min_confidence
        self.model_name = model_name
        self.system_prompt = build_system_prompt(min_confidence)

    def attempt(self, summary: ExecutionSummary,
                company_id: str | None = None) -> ClassificationResult | None:
        payload = {
            "workflow_name": summary.workflow_name,
            "workflow_description": summary.workflow_description,
            "fields": summary.descriptive_fields(),
            "allowed_metric_keys": [outcome.value for outcome in OutcomeType],
        }

        try:
            raw = self.completer.complete(self.system_prompt, payload)
        except AIResponseMalformedError as e:
            logger.warning(f"Discarding malformed AI response: {e!s}")
            return None
        except ExternalServiceUnavailableError:
            raise
        except Exception as e:
            raise ExternalServiceUnavailableError(
                f"AI completion failed: {type(e).__name__}: {e!s}"
            ) from e

        verdict = normalize_ai_output(raw)
        if verdict.problems:
            logger.warning(
                f"AI response clamped to {verdict.metric_key.value}: {'; '.join(verdict.problems)}"
            )

        if verdict.metric_key is OutcomeType.UNKNOWN or verdict.confidence < self.min_confidence:
            logger.debug(
                f"AI guess {verdict.metric_key.value} ({verdict.confidence:.2f}) does not qualify"
            )
            return None

        logger.info(f"AI classification: {verdict.metric_key.value} ({verdict.confidence:.2f})")
        return ClassificationResult(
            metric_key=verdict.metric_key,
            confidence=verdict.confidence,
            detection_layer=self.layer,
            reasoning=AIReasoning(rationale=verdict.reasoning, model=self.model_name),
            execution_id=summary.execution_id,
        )
