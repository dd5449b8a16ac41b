"""Embedding service for turning outcome descriptions into vectors using OpenAI API.
"""
import logging
import os

from openai import OpenAI

from ..config import EMBEDDING_CONFIG, MAX_RETRIES
from ..exceptions import ExternalServiceUnavailableError

logger = logging.getLogger(__name__)


class EmbeddingService:
    """Service for generating text embeddings using OpenAI."""

    def __init__(
        self,
        model: str = str(EMBEDDING_CONFIG["model"]),
        dimension: int = int(EMBEDDING_CONFIG["dimension"]),
        timeout: float = float(EMBEDDING_CONFIG["timeout"]),
        max_retries: int = MAX_RETRIES,
        api_key: str | None = None,
    ) -> None:
        """Initialize the embedding service with OpenAI client."""
        api_key = api_key or os.getenv("OPENAI_API_KEY")
        if not api_key:
            raise ValueError("OPENAI_API_KEY environment variable not set")

        self.client = OpenAI(api_key=api_key, timeout=timeout, max_retries=max_retries)
        self.model = model
        self.dimension = dimension
        self.max_chars = int(EMBEDDING_CONFIG["max_chars"])

    def embed(self, text: str) -> list[float]:
        """Generate embedding for a description.

        Args:
            text: The text to generate embedding for

        Returns:
            List of float values representing the embedding

        Raises:
            ExternalServiceUnavailableError: If the API call fails, times out
                or returns a vector of the wrong dimension

        """
        # Truncate content to avoid token limits
        truncated = text[:self.max_chars]

        try:
            response = self.client.embeddings.create(
                model=self.model,
                input=truncated
            )
            embedding = list(response.data[0].embedding)
        except Exception as e:
            logger.error(f"Embedding generation error: {e!s}")
            raise ExternalServiceUnavailableError(f"Embedding service failed: {e!s}") from e

        if len(embedding) != self.dimension:
            raise ExternalServiceUnavailableError(
                f"Embedding service returned {len(embedding)} dimensions, expected {self.dimension}"
            )
        return embedding
