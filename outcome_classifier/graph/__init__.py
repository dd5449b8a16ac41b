"""LangGraph workflow components for outcome classification."""

from .state import ClassificationState
from .workflow import ClassificationTier, create_initial_state, get_compiled_workflow

__all__ = ["ClassificationState", "ClassificationTier", "create_initial_state", "get_compiled_workflow"]
