"""Configuration settings for the workflow outcome classifier."""

import os
from dataclasses import dataclass

from .exceptions import InvalidInputError

# Model configuration
MODEL_CONFIG: dict[str, str | float | int] = {
    "classification_model": "gpt-4o-mini",
    "temperature": 0.1,
    "max_tokens": 500,
    "timeout": 15.0,  # seconds
}

EMBEDDING_CONFIG: dict[str, str | float | int] = {
    "model": "text-embedding-3-small",
    "dimension": 1536,
    "timeout": 5.0,  # seconds
    "max_chars": 8000,  # ~2000 tokens
}

MAX_RETRIES = 1

# Classification thresholds
SIMILARITY_THRESHOLD = 0.80  # vector tier qualifies at or above this
HEURISTIC_MIN_SCORE = 0.5  # fraction of expected fields present
AI_MIN_CONFIDENCE = 0.6  # the AI prompt asks for "unknown" below this
VECTOR_MATCH_COUNT = 3

# Executions remembered for confirm() lookups
RECENT_EXECUTION_LIMIT = 1024

# Pause between embedding requests while seeding
SEED_REQUEST_DELAY = 0.1  # seconds

# Logging configuration
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_LEVEL = "INFO"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise InvalidInputError(f"{name} must be a number, got {raw!r}") from e


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise InvalidInputError(f"{name} must be an integer, got {raw!r}") from e


@dataclass(frozen=True)
class ClassifierSettings:
    """Tunable thresholds, models and timeouts for one classifier instance."""

    similarity_threshold: float = SIMILARITY_THRESHOLD
    heuristic_min_score: float = HEURISTIC_MIN_SCORE
    ai_min_confidence: float = AI_MIN_CONFIDENCE
    vector_match_count: int = VECTOR_MATCH_COUNT
    embedding_model: str = str(EMBEDDING_CONFIG["model"])
    embedding_dimension: int = int(EMBEDDING_CONFIG["dimension"])
    embedding_timeout: float = float(EMBEDDING_CONFIG["timeout"])
    ai_model: str = str(MODEL_CONFIG["classification_model"])
    ai_temperature: float = float(MODEL_CONFIG["temperature"])
    ai_timeout: float = float(MODEL_CONFIG["timeout"])
    max_retries: int = MAX_RETRIES
    recent_execution_limit: int = RECENT_EXECUTION_LIMIT

    def __post_init__(self) -> None:
        for name in ("similarity_threshold", "heuristic_min_score", "ai_min_confidence"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise InvalidInputError(f"{name} must be within [0, 1], got {value}")
        if self.vector_match_count < 1:
            raise InvalidInputError("vector_match_count must be at least 1")
        if self.embedding_dimension < 1:
            raise InvalidInputError("embedding_dimension must be at least 1")
        if self.embedding_timeout <= 0 or self.ai_timeout <= 0:
            raise InvalidInputError("timeouts must be positive")
        if self.max_retries < 0:
            raise InvalidInputError("max_retries cannot be negative")

    @classmethod
    def from_env(cls) -> "ClassifierSettings":
        """Build settings from OUTCOME_* environment variables.

        Unset variables keep their defaults.

        Returns:
            ClassifierSettings instance

        Raises:
            InvalidInputError: If a variable is set to an unusable value

        """
        return cls(
            similarity_threshold=_env_float("OUTCOME_SIMILARITY_THRESHOLD", SIMILARITY_THRESHOLD),
            heuristic_min_score=_env_float("OUTCOME_HEURISTIC_MIN_SCORE", HEURISTIC_MIN_SCORE),
            ai_min_confidence=_env_float("OUTCOME_AI_MIN_CONFIDENCE", AI_MIN_CONFIDENCE),
            vector_match_count=_env_int("OUTCOME_VECTOR_MATCH_COUNT", VECTOR_MATCH_COUNT),
            embedding_model=os.getenv("OUTCOME_EMBEDDING_MODEL") or str(EMBEDDING_CONFIG["model"]),
            embedding_dimension=_env_int(
                "OUTCOME_EMBEDDING_DIMENSION", int(EMBEDDING_CONFIG["dimension"])
            ),
            embedding_timeout=_env_float(
                "OUTCOME_EMBEDDING_TIMEOUT", float(EMBEDDING_CONFIG["timeout"])
            ),
            ai_model=os.getenv("OUTCOME_AI_MODEL") or str(MODEL_CONFIG["classification_model"]),
            ai_timeout=_env_float("OUTCOME_AI_TIMEOUT", float(MODEL_CONFIG["timeout"])),
            max_retries=_env_int("OUTCOME_MAX_RETRIES", MAX_RETRIES),
        )
