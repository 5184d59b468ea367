"""
Per-request Validation Error Tracker

Immutable accumulator of field validation failures. A tracker is built fresh
for each request by folding validator results into it, serialized once for the
rendering layer, and then discarded.

Copyright (c) 2025 LTI XML Builder contributors
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple

from typing_extensions import TypedDict

from ltixml.integration.validation import ValidationResult


class SerializedErrorTracker(TypedDict):
    """Snapshot handed to the rendering layer; identical keys on every response."""

    errors: Dict[str, Optional[str]]
    has_errors: bool
    text: str


@dataclass(frozen=True)
class ErrorTracker:
    """
    Mapping from field name to an optional failure message.

    add() never mutates the tracker; it returns a new one. Only failing
    results surface: a passing result never clears an earlier failure for the
    same field.
    """

    _errors: Mapping[str, Optional[str]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @classmethod
    def for_fields(cls, field_names: Iterable[str]) -> ErrorTracker:
        """Create a tracker that reports every named field, all valid."""
        return cls(MappingProxyType({name: None for name in field_names}))

    @classmethod
    def from_results(
        cls,
        results: Iterable[Tuple[str, ValidationResult]],
        field_names: Iterable[str] = (),
    ) -> ErrorTracker:
        """
        Fold (field name, result) pairs into a tracker.

        Args:
            results: Validation results in the order they were produced
            field_names: Fields to report even when no result names them

        Returns:
            Tracker holding every failure among the results
        """
        tracker = cls.for_fields(field_names)
        for field_name, result in results:
            tracker = tracker.add(field_name, result)
        return tracker

    def add(self, field_name: str, result: ValidationResult) -> ErrorTracker:
        errors = dict(self._errors)
        if not result.valid:
            errors[field_name] = result.message or f"Invalid value for {field_name}"
        else:
            errors.setdefault(field_name, None)
        return ErrorTracker(MappingProxyType(errors))

    def has_errors(self) -> bool:
        return any(message is not None for message in self._errors.values())

    @property
    def errors(self) -> Dict[str, Optional[str]]:
        return dict(self._errors)

    def error_for(self, field_name: str) -> Optional[str]:
        return self._errors.get(field_name)

    @property
    def text(self) -> str:
        """All failure messages joined for direct display; empty when valid."""
        return "\n".join(
            message for message in self._errors.values() if message is not None
        )

    def to_json(self) -> SerializedErrorTracker:
        return {
            "errors": self.errors,
            "has_errors": self.has_errors(),
            "text": self.text,
        }


__all__ = [
    'ErrorTracker',
    'SerializedErrorTracker',
]
