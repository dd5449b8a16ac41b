"""Learned outcome description model for vector-similarity matching."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import uuid4

from ..constants import CJK_PATTERN, LATIN_PATTERN
from .outcome import OutcomeType


class DescriptionSource(str, Enum):
    """Where a stored description came from."""

    SYSTEM = "system"
    USER_CONFIRMED = "user_confirmed"


class Language(str, Enum):
    """Language tag kept for bookkeeping; never used to make decisions."""

    EN = "en"
    ZH = "zh"
    MIXED = "mixed"


def detect_language(text: str) -> Language:
    """Tag text as zh when it has CJK codepoints, mixed when it also has Latin letters."""
    has_cjk = bool(CJK_PATTERN.search(text))
    if not has_cjk:
        return Language.EN
    if LATIN_PATTERN.search(text):
        return Language.MIXED
    return Language.ZH


@dataclass(frozen=True)
class OutcomeDescription:
    """A natural-language example of one canonical outcome with its embedding."""

    metric_key: OutcomeType
    description: str
    embedding: tuple[float, ...]
    source: DescriptionSource = DescriptionSource.SYSTEM
    language: Language = Language.EN
    company_id: str | None = None  # None = global, visible to every tenant
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def is_global(self) -> bool:
        return self.company_id is None

    def to_dict(self) -> dict[str, Any]:
        """Convert description to dictionary for serialization."""
        return {
            "id": self.id,
            "metric_key": self.metric_key.value,
            "description": self.description,
            "language": self.language.value,
            "source": self.source.value,
            "company_id": self.company_id,
            "embedding": list(self.embedding),
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OutcomeDescription":
        """Create description from dictionary."""
        return cls(
            id=data["id"],
            metric_key=OutcomeType(data["metric_key"]),
            description=data["description"],
            language=Language(data.get("language", Language.EN.value)),
            source=DescriptionSource(data.get("source", DescriptionSource.SYSTEM.value)),
            company_id=data.get("company_id"),
            embedding=tuple(float(x) for x in data["embedding"]),
            created_at=datetime.fromisoformat(data["created_at"]),
        )
