"""Execution summary model: the open-ended field bag of one workflow run."""

import math
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from ..constants import BOOKKEEPING_FIELDS, WORKFLOW_DESCRIPTION_FIELD, WORKFLOW_NAME_FIELD
from ..exceptions import InvalidInputError

FieldValue = str | int | float | bool | None

_PRIMITIVES = (str, int, float, bool, type(None))


def normalize_field_name(name: str) -> str:
    """Case-fold a field name and turn spaces and hyphens into underscores."""
    return "_".join(name.strip().casefold().replace("-", " ").split())


def is_present(value: FieldValue) -> bool:
    """A field counts as present unless it is None or a blank string."""
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


@dataclass(frozen=True)
class ExecutionSummary(Mapping[str, FieldValue]):
    """Key/value fields extracted from one workflow execution.

    The set of fields is open-ended and any field may be absent. Use
    from_mapping() to build one from untrusted input.
    """

    fields: Mapping[str, FieldValue] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Any) -> "ExecutionSummary":
        """Validate raw execution metadata and wrap it.

        Args:
            data: Mapping of field name to primitive value

        Returns:
            Immutable ExecutionSummary

        Raises:
            InvalidInputError: If data is None, not a mapping, empty, or holds
                non-string keys or non-primitive values

        """
        if isinstance(data, ExecutionSummary):
            return data
        if data is None:
            raise InvalidInputError("Execution summary is required")
        if not isinstance(data, Mapping):
            raise InvalidInputError(
                f"Execution summary must be a mapping, got {type(data).__name__}"
            )
        if not data:
            raise InvalidInputError("Execution summary is empty")

        cleaned: dict[str, FieldValue] = {}
        for key, value in data.items():
            if not isinstance(key, str) or not key.strip():
                raise InvalidInputError(f"Field names must be non-empty strings, got {key!r}")
            if not isinstance(value, _PRIMITIVES):
                raise InvalidInputError(
                    f"Field '{key}' must be a string, number, boolean or null, "
                    f"got {type(value).__name__}"
                )
            if isinstance(value, float) and not math.isfinite(value):
                raise InvalidInputError(f"Field '{key}' is not a finite number")
            cleaned[key.strip()] = value

        return cls(fields=MappingProxyType(cleaned))

    def __getitem__(self, key: str) -> FieldValue:
        return self.fields[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    @property
    def execution_id(self) -> str | None:
        value = self.fields.get("execution_id")
        return str(value).strip() if is_present(value) else None

    @property
    def workflow_name(self) -> str | None:
        value = self.fields.get(WORKFLOW_NAME_FIELD)
        return str(value).strip() if is_present(value) else None

    @property
    def workflow_description(self) -> str | None:
        value = self.fields.get(WORKFLOW_DESCRIPTION_FIELD)
        return str(value).strip() if is_present(value) else None

    def present_fields(self) -> dict[str, FieldValue]:
        """Fields with a usable value, keyed by normalized name."""
        return {
            normalize_field_name(name): value
            for name, value in self.fields.items()
            if is_present(value)
        }

    def descriptive_fields(self) -> dict[str, FieldValue]:
        """Present fields minus bookkeeping ids and the workflow name/description."""
        skipped = BOOKKEEPING_FIELDS | {WORKFLOW_NAME_FIELD, WORKFLOW_DESCRIPTION_FIELD}
        return {
            name: value
            for name, value in self.fields.items()
            if is_present(value) and normalize_field_name(name) not in skipped
        }

    def render_description(self) -> str:
        """Render the summary as a short sentence for embedding.

        Bookkeeping ids are left out so two runs of the same workflow render
        the same way.
        """
        parts = []
        if self.workflow_name:
            parts.append(f"Workflow: {self.workflow_name}")
        if self.workflow_description:
            parts.append(self.workflow_description)

        data = ", ".join(
            f"{name}: {_format_value(value)}" for name, value in self.descriptive_fields().items()
        )
        if data:
            parts.append(f"Data: {data}")

        if not parts:
            # Only bookkeeping ids were supplied
            parts.append(", ".join(f"{name}: {value}" for name, value in self.present_fields().items()))

        return ". ".join(part for part in parts if part)

    def to_dict(self) -> dict[str, FieldValue]:
        """Plain dict copy for serialization."""
        return dict(self.fields)


def _format_value(value: FieldValue) -> str:
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, str):
        return value.strip()
    return str(value)
