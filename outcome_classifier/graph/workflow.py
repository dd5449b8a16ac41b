import logging
from collections.abc import Callable, Sequence
from typing import Protocol

from langgraph.graph import END, StateGraph
from langgraph.graph.state import CompiledStateGraph

from ..exceptions import AIResponseMalformedError, ExternalServiceUnavailableError
from ..models.outcome import DetectionLayer
from ..models.result import ClassificationResult
from ..models.summary import ExecutionSummary
from ..utils.error_handling import create_unknown_result, describe_skips
from .state import ClassificationState

logger = logging.getLogger(__name__)

DEFAULT_NODE = "default"


class ClassificationTier(Protocol):
    """One strategy in the fallback chain."""

    layer: DetectionLayer

    def attempt(self, summary: ExecutionSummary,
                company_id: str | None = None) -> ClassificationResult | None: ...


def make_tier_node(tier: ClassificationTier) -> Callable[[ClassificationState], dict]:
    """Wrap a tier so any failure skips it instead of failing the run."""

    def run_tier(state: ClassificationState) -> dict:
        try:
            result = tier.attempt(state["summary"], state["company_id"])
        except (ExternalServiceUnavailableError, AIResponseMalformedError) as e:
            logger.warning(f"Skipping {tier.layer.value} tier: {e!s}")
            reason = str(e)
        except Exception as e:
            logger.exception(f"Unexpected error in {tier.layer.value} tier, skipping it")
            reason = f"{type(e).__name__}: {e!s}"
        else:
            if result is None:
                return {}
            return {"result": result}

        skipped = {"layer": tier.layer.value, "reason": reason}
        return {"skipped": [*state.get("skipped", []), skipped]}

    run_tier.__name__ = f"run_{tier.layer.value}"
    return run_tier


def classify_default(state: ClassificationState) -> dict:
    """Last node: nothing qualified, so the execution is unknown."""
    skipped = tuple(item["layer"] for item in state.get("skipped", []))
    logger.info("Could not classify outcome, marking as unknown")
    return {
        "result": create_unknown_result(
            state["summary"],
            note=f"No known outcome pattern matched{describe_skips(skipped)}",
        )
    }


def _route_after(next_node: str) -> Callable[[ClassificationState], str]:
    def route(state: ClassificationState) -> str:
        # The first tier that produced a result ends the run
        if state.get("result") is not None:
            return "end"
        return next_node

    return route


def get_compiled_workflow(
    tiers: Sequence[ClassificationTier],
) -> CompiledStateGraph:
    """Compile an ordered list of tiers into a short-circuiting workflow.

    Args:
        tiers: Strategies in priority order; the default node always runs last

    Returns:
        Compiled LangGraph workflow

    """
    # Create a new graph
    workflow = StateGraph(ClassificationState)

    names = [tier.layer.value for tier in tiers]
    if len(set(names)) != len(names):
        raise ValueError(f"Tier layers must be unique, got {names}")

    # Add nodes
    for tier in tiers:
        workflow.add_node(tier.layer.value, make_tier_node(tier))
    workflow.add_node(DEFAULT_NODE, classify_default)

    # Each tier either ends the run or hands over to the next one
    for current, following in zip(names, [*names[1:], DEFAULT_NODE]):
        workflow.add_conditional_edges(
            current,
            _route_after(following),
            {
                following: following,
                "end": END,
            }
        )

    # Set the entry point
    workflow.set_entry_point(names[0] if names else DEFAULT_NODE)

    # Set the finish point
    workflow.set_finish_point(DEFAULT_NODE)

    return workflow.compile()


def create_initial_state(summary: ExecutionSummary, company_id: str | None) -> ClassificationState:
    """Create initial state for one classification run.

    Args:
        summary: Validated execution summary
        company_id: Tenant the execution belongs to

    Returns:
        Initial classification state

    """
    return {
        "summary": summary,
        "company_id": company_id,
        "result": None,
        "skipped": [],
    }
