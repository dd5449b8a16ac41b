"""Workflow Outcome Classifier - tiered classification of automation runs into business outcomes."""

from .config import MODEL_CONFIG, ClassifierSettings
from .exceptions import (
    AIResponseMalformedError,
    ExternalServiceUnavailableError,
    InvalidInputError,
    LearningUnavailableError,
    OutcomeClassifierError,
)
from .models.outcome import DetectionLayer, OutcomeType
from .models.result import ClassificationResult
from .processing.classifier import OutcomeClassifier
from .services.description_store import DescriptionStore

__version__ = "0.1.0"
__all__ = [
    "MODEL_CONFIG",
    "AIResponseMalformedError",
    "ClassificationResult",
    "ClassifierSettings",
    "DescriptionStore",
    "DetectionLayer",
    "ExternalServiceUnavailableError",
    "InvalidInputError",
    "LearningUnavailableError",
    "OutcomeClassifier",
    "OutcomeClassifierError",
    "OutcomeType",
]
