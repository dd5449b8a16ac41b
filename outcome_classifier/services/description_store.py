"""Append-only storage for outcome descriptions with nearest-neighbour search.
"""

import json
import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

import numpy as np

from ..config import EMBEDDING_CONFIG
from ..exceptions import InvalidInputError
from ..models.description import OutcomeDescription
from ..models.outcome import OutcomeType

logger = logging.getLogger(__name__)


@dataclass
class UsageStats:
    """How often a description has won the vector tier."""

    usage_count: int = 0
    last_used_at: datetime | None = None
    average_similarity: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "usage_count": self.usage_count,
            "last_used_at": self.last_used_at.isoformat() if self.last_used_at else None,
            "average_similarity": self.average_similarity,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UsageStats":
        last_used = data.get("last_used_at")
        return cls(
            usage_count=int(data.get("usage_count", 0)),
            last_used_at=datetime.fromisoformat(last_used) if last_used else None,
            average_similarity=float(data.get("average_similarity", 0.0)),
        )


class DescriptionStore:
    """In-memory, append-only store of outcome descriptions.

    Descriptions are never updated or removed. Searches work on a snapshot
    taken under the lock, so they are safe while other threads append.
    """

    def __init__(self, dimension: int = int(EMBEDDING_CONFIG["dimension"])) -> None:
        """Initialize empty store for vectors of a fixed dimension."""
        self.dimension = dimension
        self._lock = threading.Lock()
        self._descriptions: list[OutcomeDescription] = []
        # Unit-length copies of the embeddings, same order as _descriptions
        self._vectors: list[np.ndarray] = []
        # Usage is kept beside the rows so descriptions stay immutable
        self._usage: dict[str, UsageStats] = {}

    def add(self, description: OutcomeDescription) -> OutcomeDescription:
        """Append a description.

        Args:
            description: The description to store

        Returns:
            The stored description

        Raises:
            InvalidInputError: If the metric key is unknown, the text is blank
                or the embedding has the wrong dimension or non-finite values

        """
        if description.metric_key is OutcomeType.UNKNOWN:
            raise InvalidInputError("Descriptions must describe a known outcome")
        if not description.description.strip():
            raise InvalidInputError("Description text is empty")
        if len(description.embedding) != self.dimension:
            raise InvalidInputError(
                f"Embedding has {len(description.embedding)} dimensions, "
                f"store expects {self.dimension}"
            )

        vector = np.asarray(description.embedding, dtype=float)
        if not np.all(np.isfinite(vector)):
            raise InvalidInputError("Embedding contains NaN or infinite values")
        norm = np.linalg.norm(vector)
        # Zero vectors can never be similar to anything
        normalized = vector / norm if norm > 0 else vector

        with self._lock:
            self._descriptions.append(description)
            self._vectors.append(normalized)

        logger.debug(
            f"Stored {description.source.value} description for {description.metric_key.value}: "
            f"'{description.description[:50]}'"
        )
        return description

    def search(self, embedding: list[float], company_id: str | None = None,
               limit: int = 3) -> list[tuple[OutcomeDescription, float]]:
        """Find the nearest descriptions by cosine similarity.

        Args:
            embedding: Query vector
            company_id: Tenant whose own descriptions are searched alongside
                the global ones; None searches global descriptions only
            limit: Maximum number of matches to return

        Returns:
            List of (description, similarity) tuples, most similar first

        """
        if len(embedding) != self.dimension:
            raise InvalidInputError(
                f"Query embedding has {len(embedding)} dimensions, store expects {self.dimension}"
            )

        query = np.asarray(embedding, dtype=float)
        if not np.all(np.isfinite(query)):
            raise InvalidInputError("Query embedding contains NaN or infinite values")

        with self._lock:
            candidates = [
                (description, vector)
                for description, vector in zip(self._descriptions, self._vectors)
                if description.company_id is None or description.company_id == company_id
            ]

        if not candidates or limit < 1:
            return []

        norm = np.linalg.norm(query)
        if norm == 0:
            return []

        matrix = np.vstack([vector for _, vector in candidates])
        similarities = matrix @ (query / norm)

        # Stable sort keeps insertion order among equal similarities
        order = np.argsort(-similarities, kind="stable")[:limit]
        return [(candidates[i][0], float(similarities[i])) for i in order]

    def contains(self, metric_key: OutcomeType, text: str, company_id: str | None = None) -> bool:
        """Check whether an identical description already exists in a scope."""
        with self._lock:
            return any(
                d.metric_key is metric_key and d.description == text and d.company_id == company_id
                for d in self._descriptions
            )

    def record_usage(self, description_id: str, similarity: float) -> UsageStats:
        """Record that a description won the vector tier."""
        with self._lock:
            stats = self._usage.setdefault(description_id, UsageStats())
            total = stats.average_similarity * stats.usage_count + similarity
            stats.usage_count += 1
            stats.average_similarity = total / stats.usage_count
            stats.last_used_at = datetime.now()
            return stats

    def get_usage(self, description_id: str) -> UsageStats | None:
        with self._lock:
            return self._usage.get(description_id)

    def get_descriptions(self, company_id: str | None = None,
                         include_global: bool = True) -> list[OutcomeDescription]:
        """Get stored descriptions, optionally restricted to one tenant."""
        with self._lock:
            descriptions = list(self._descriptions)
        if company_id is None:
            return descriptions
        return [
            d for d in descriptions
            if d.company_id == company_id or (include_global and d.is_global)
        ]

    def count(self) -> int:
        """Get the number of stored descriptions."""
        with self._lock:
            return len(self._descriptions)

    def to_dict(self) -> dict:
        """Convert store to dictionary for serialization.

        Returns:
            Dictionary representation of the store
        """
        with self._lock:
            return {
                "dimension": self.dimension,
                "descriptions": [d.to_dict() for d in self._descriptions],
                "usage": {key: stats.to_dict() for key, stats in self._usage.items()},
            }

    @classmethod
    def from_dict(cls, data: dict) -> "DescriptionStore":
        """Create store from dictionary.

        Args:
            data: Dictionary representation of the store

        Returns:
            New DescriptionStore instance
        """
        store = cls(dimension=int(data.get("dimension", EMBEDDING_CONFIG["dimension"])))
        for item in data.get("descriptions", []):
            store.add(OutcomeDescription.from_dict(item))
        store._usage = {
            key: UsageStats.from_dict(value) for key, value in data.get("usage", {}).items()
        }
        return store

    def save(self, path: Path) -> None:
        """Write the store to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, ensure_ascii=False)
        logger.info(f"Saved {self.count()} descriptions to {path}")

    @classmethod
    def load(cls, path: Path, dimension: int = int(EMBEDDING_CONFIG["dimension"])) -> "DescriptionStore":
        """Read a store from a JSON file, or start an empty one if it does not exist."""
        path = Path(path)
        if not path.exists():
            logger.info(f"No description store at {path}, starting empty")
            return cls(dimension=dimension)
        with open(path, encoding="utf-8") as f:
            store = cls.from_dict(json.load(f))
        if store.dimension != dimension:
            raise InvalidInputError(
                f"Store at {path} holds {store.dimension}-dimension vectors, expected {dimension}"
            )
        logger.info(f"Loaded {store.count()} descriptions from {path}")
        return store
