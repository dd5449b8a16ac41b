"""Heuristic tier: score outcomes by how many of their expected fields are present."""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass

from ...constants import EXPECTED_FIELDS, FIELD_ALIASES, NEGATION_WORDS
from ...models.outcome import DetectionLayer, OutcomeType
from ...models.result import ClassificationResult, HeuristicReasoning
from ...models.summary import ExecutionSummary, FieldValue, normalize_field_name

logger = logging.getLogger(__name__)

_WORD_SEPARATOR = re.compile(r"[\W_]+")


def mentions(value: str, word: str) -> bool:
    """Check whether a casefolded field value mentions a qualifier word.

    Latin words must appear whole and not right after a negation, so
    "abandoned" does not mention "done" and "not closed" does not mention
    "closed". CJK qualifiers have no word boundaries and match as substrings.
    """
    if not word.isascii():
        return word in value
    words = [w for w in _WORD_SEPARATOR.split(value) if w]
    return any(
        w == word and (i == 0 or words[i - 1] not in NEGATION_WORDS)
        for i, w in enumerate(words)
    )


@dataclass(frozen=True)
class FieldExpectation:
    """One expected field, optionally qualified by the values it may hold."""

    name: str
    aliases: tuple[str, ...] = ()
    accepted_values: tuple[str, ...] = ()
    rejected_values: tuple[str, ...] = ()
    label: str = ""
    required: bool = False

    @classmethod
    def parse(cls, rule: str,
              aliases: Mapping[str, tuple[str, ...]] = FIELD_ALIASES) -> "FieldExpectation":
        """Parse "field", "field=a|b" or "field!=a|b", optionally prefixed with "+"."""
        rule = rule.strip()
        required = rule.startswith("+")
        if required:
            rule = rule[1:]
        accepted: tuple[str, ...] = ()
        rejected: tuple[str, ...] = ()
        if "!=" in rule:
            name, values = rule.split("!=", 1)
            rejected = tuple(v.strip().casefold() for v in values.split("|") if v.strip())
        elif "=" in rule:
            name, values = rule.split("=", 1)
            accepted = tuple(v.strip().casefold() for v in values.split("|") if v.strip())
        else:
            name = rule

        name = normalize_field_name(name)
        return cls(
            name=name,
            aliases=tuple(normalize_field_name(a) for a in aliases.get(name, ())),
            accepted_values=accepted,
            rejected_values=rejected,
            label=rule,
            required=required,
        )

    def is_met(self, present: Mapping[str, FieldValue]) -> bool:
        """Check a normalized field bag for this expectation."""
        for candidate in (self.name, *self.aliases):
            if candidate not in present:
                continue
            value = str(present[candidate]).casefold()
            if self.accepted_values and not any(mentions(value, w) for w in self.accepted_values):
                continue
            if any(mentions(value, w) for w in self.rejected_values):
                continue
            return True
        return False


def build_expectations(
    table: Mapping[OutcomeType, tuple[str, ...]] = EXPECTED_FIELDS,
) -> tuple[tuple[OutcomeType, tuple[FieldExpectation, ...]], ...]:
    """Parse the expected-fields table, ordered by outcome priority."""
    return tuple(
        (outcome, tuple(FieldExpectation.parse(rule) for rule in table[outcome]))
        for outcome in OutcomeType.known()
        if outcome in table
    )


def score_outcomes(
    summary: ExecutionSummary,
    expectations: tuple[tuple[OutcomeType, tuple[FieldExpectation, ...]], ...],
) -> list[tuple[OutcomeType, float, tuple[str, ...], tuple[str, ...], tuple[str, ...]]]:
    """Score every outcome by fraction of expected fields found.

    An outcome missing one of its required fields scores 0.

    Returns:
        (outcome, score, expected, found, missing) per outcome, in priority order

    """
    present = summary.present_fields()
    scores = []
    for outcome, fields in expectations:
        if not fields:
            continue
        expected = tuple(f.label for f in fields)
        found = tuple(f.label for f in fields if f.is_met(present))
        missing = tuple(label for label in expected if label not in found)
        if any(f.required and f.label in missing for f in fields):
            score = 0.0
        else:
            score = len(found) / len(fields)
        scores.append((outcome, score, expected, found, missing))
    return scores


class HeuristicTier:
    """Second tier: expected-field presence.

    Ties are broken by OutcomeType declaration order. This is an arbitrary
    but fixed priority: with equal scores, meeting_booked beats lead_created,
    which beats ticket_created, and so on down to deal_won.
    """

    layer = DetectionLayer.HEURISTIC

    def __init__(
        self,
        min_score: float,
        expectations: tuple[tuple[OutcomeType, tuple[FieldExpectation, ...]], ...] | None = None,
    ) -> None:
        self.min_score = min_score
        self.expectations = expectations if expectations is not None else build_expectations()

    def attempt(self, summary: ExecutionSummary,
                company_id: str | None = None) -> ClassificationResult | None:
        best = None
        for candidate in score_outcomes(summary, self.expectations):
            # Strict comparison keeps the earlier-declared outcome on ties
            if best is None or candidate[1] > best[1]:
                best = candidate

        if best is None or best[1] < self.min_score:
            logger.debug(
                f"Heuristic best score {best[1] if best else 0.0:.2f} below {self.min_score:.2f}"
            )
            return None

        outcome, score, expected, found, missing = best
        logger.info(f"Heuristic classification: {outcome.value} ({score:.2f})")
        return ClassificationResult(
            metric_key=outcome,
            confidence=score,
            detection_layer=self.layer,
            reasoning=HeuristicReasoning(
                expected_fields=expected,
                found_fields=found,
                missing_fields=missing,
            ),
            execution_id=summary.execution_id,
        )
