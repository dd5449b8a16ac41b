"""Fake external services for the outcome classifier tests. No test touches the network."""

import re

from outcome_classifier.exceptions import ExternalServiceUnavailableError

TEST_DIMENSION = 512


class VocabularyEmbedder:
    """Deterministic bag-of-words embedder.

    Each distinct token gets its own axis the first time it is seen, so
    cosine similarity is the word-overlap similarity of two texts.
    """

    def __init__(self, dimension: int = TEST_DIMENSION) -> None:
        self.dimension = dimension
        self.vocabulary: dict[str, int] = {}
        self.calls: list[str] = []

    def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        vector = [0.0] * self.dimension
        for token in re.findall(r"\w+", text.lower()):
            index = self.vocabulary.setdefault(token, len(self.vocabulary))
            vector[index % self.dimension] += 1.0
        return vector

class StaticEmbedder:
    """Returns the same vector for every text."""

    def __init__(self, vector: list[float]) -> None:
        self.vector = vector
        self.calls: list[str] = []

    def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        return list(self.vector)

class FailingEmbedder:
    """Embedding service that is always down."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        raise ExternalServiceUnavailableError("embedding service timed out")

class FakeCompleter:
    """AI service returning canned responses, or raising a canned error."""

    def __init__(self, response=None, error: Exception | None = None) -> None:
        self.response = response if response is not None else {
            "metric_key": "unknown", "confidence": 0.0, "reasoning": "no evidence",
        }
        self.error = error
        self.calls: list[tuple[str, dict]] = []

    def complete(self, system_prompt, payload):
        self.calls.append((system_prompt, dict(payload)))
        if self.error is not None:
            raise self.error
        return self.response


class RaisingEmbedder:
    """Embedder whose client fails with a raw, unwrapped error."""

    def __init__(self, error: Exception) -> None:
        self.error = error
        self.calls: list[str] = []

    def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        raise self.error
