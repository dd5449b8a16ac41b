"""Custom exceptions for the workflow outcome classifier."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models.confirmation import OutcomeConfirmation


class OutcomeClassifierError(Exception):
    """Base exception for the outcome classifier."""

    pass


class InvalidInputError(OutcomeClassifierError):
    """Raised when an execution summary or confirmation is empty or malformed."""

    pass


class ExternalServiceUnavailableError(OutcomeClassifierError):
    """Raised when the embedding, search or AI service cannot be reached."""

    pass


class LearningUnavailableError(ExternalServiceUnavailableError):
    """Raised by confirm when the confirmation was recorded but not learned.

    The human's chosen metric key is persisted; only the embedding
    enrichment failed, so the caller may retry later.
    """

    def __init__(self, message: str, confirmation: "OutcomeConfirmation | None" = None) -> None:
        super().__init__(message)
        self.confirmation = confirmation


class AIResponseMalformedError(OutcomeClassifierError):
    """Raised when the AI service returns output that cannot be used."""

    pass
