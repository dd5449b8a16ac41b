"""Human-readable review messages for classification results."""

from ..constants import METRIC_LABELS
from ..models.description import Language
from ..models.outcome import OutcomeType
from ..models.result import (
    AIReasoning,
    ClassificationResult,
    DefaultReasoning,
    HeuristicReasoning,
    VectorMatchReasoning,
)


def metric_label(metric_key: OutcomeType | str) -> str:
    """Get the display label for a metric key, falling back to a title-cased key."""
    outcome = OutcomeType.from_string(metric_key)
    if outcome is None:
        return str(metric_key).replace("_", " ").title()
    return METRIC_LABELS[outcome]


def _join(items: tuple[str, ...], language: Language, empty: str) -> str:
    if not items:
        return empty
    return ("、" if language is Language.ZH else ", ").join(items)


def render_explanation(result: ClassificationResult, language: Language = Language.EN) -> str:
    """Explain a result to a reviewer.

    Args:
        result: The classification to explain
        language: en or zh; mixed renders in English

    Returns:
        Message describing why the outcome was suggested

    """
    label = metric_label(result.metric_key)
    percent = round(result.confidence * 100)
    reasoning = result.reasoning
    zh = language is Language.ZH

    if isinstance(reasoning, VectorMatchReasoning):
        similarity = round(reasoning.similarity * 100)
        if zh:
            return f"與「{reasoning.matched_description}」語義相似（{similarity}%）。建議：{label}。"
        return (
            f'Found semantic match to "{reasoning.matched_description}" '
            f"({similarity}% similarity). Suggested: {label}."
        )

    if isinstance(reasoning, HeuristicReasoning):
        expected = _join(reasoning.expected_fields, language, "")
        found = _join(reasoning.found_fields, language, "無關鍵資料" if zh else "no key data")
        missing = _join(reasoning.missing_fields, language, "無" if zh else "none")
        if zh:
            return (
                f"關鍵欄位顯示為 {label}。信心 {percent}%，預期 [{expected}]，"
                f"實際 [{found}]，缺少 [{missing}]。"
            )
        return (
            f"Fields suggest {label}. Confidence {percent}% because expected [{expected}] "
            f"and found [{found}]. Missing: {missing}."
        )

    if isinstance(reasoning, AIReasoning):
        rationale = reasoning.rationale or (
            "資料模式不明確" if zh else "unclear patterns in the execution data"
        )
        if zh:
            return f"AI 分析顯示可能為 {label}（信心 {percent}%），原因：{rationale}"
        return f"AI analysis suggests this could be {label} ({percent}% confidence) because: {rationale}"

    present = reasoning.present_fields if isinstance(reasoning, DefaultReasoning) else ()
    known = ", ".join(metric_label(outcome) for outcome in OutcomeType.known())
    skipped = ""
    if result.skipped_layers:
        skipped = (
            f"\n略過的層級：{'、'.join(result.skipped_layers)}" if zh
            else f"\nSkipped tiers: {', '.join(result.skipped_layers)}"
        )
    if zh:
        return (
            f"無法判定成果（信心 {percent}%）。\n偵測到的資料欄位：{_join(present, language, '無')}"
            f"{skipped}\n\n沒有符合的模式：{known}。"
        )
    return (
        f"Couldn't determine an outcome ({percent}% confidence).\n"
        f"Data fields seen: {_join(present, language, 'none')}{skipped}\n\n"
        f"No clear patterns matching: {known}."
    )
