"""
LTI Form Field Validators

Pure functions that check the raw string value of a single form field. A
validator never raises on malformed input: reporting malformed input is its
whole job, so every outcome is returned as a ValidationResult.

Copyright (c) 2025 LTI XML Builder contributors
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Final, Iterable, List, Optional, Tuple, Type

from ltixml.integration.placements import get_placement


class PrivacyLevel(str, Enum):
    """How much user information Canvas sends to the tool at launch."""

    PUBLIC = "public"
    NAME_ONLY = "name_only"
    ANONYMOUS = "anonymous"


class Visibility(str, Enum):
    """Which course members see the tool's navigation links."""

    PUBLIC = "public"
    MEMBERS = "members"
    ADMINS = "admins"


_DIMENSION = re.compile(r"[0-9]+")

CUSTOM_FIELDS_RULE: Final[str] = "Custom fields must be in the form key=value, one per line"


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one field: either valid, or invalid with a reason."""

    valid: bool
    message: Optional[str] = None

    @classmethod
    def ok(cls) -> 'ValidationResult':
        return cls(valid=True)

    @classmethod
    def fail(cls, message: str) -> 'ValidationResult':
        return cls(valid=False, message=message)


Validator = Callable[[Optional[str]], ValidationResult]


def split_custom_field(line: str) -> Optional[Tuple[str, str]]:
    """
    Split one custom-field line into its key and value.

    The line is split on the first '=' so values may themselves contain '='.
    Surrounding whitespace on the key and value is dropped.

    Args:
        line: A single, non-blank line of the custom fields text

    Returns:
        (key, value) tuple, or None if the line is not of the form key=value
    """
    key, sep, value = line.partition("=")
    key = key.strip()
    if not sep or not key:
        return None
    return key, value.strip()


def iter_custom_field_lines(text: Optional[str]) -> List[Tuple[int, str]]:
    """
    Return (line number, stripped line) pairs for the non-blank lines of text.

    Lines end at a newline, optionally preceded by a carriage return, which is
    what a browser textarea submits. Other Unicode line separators stay inside the line.
    """
    if not text:
        return []
    return [
        (number, line.strip())
        for number, line in enumerate(text.split("\n"), start=1)
        if line.strip()
    ]


def validate_custom_fields(text: Optional[str]) -> ValidationResult:
    """
    Validate the multi-line custom fields text.

    Every non-blank line must be key=value with a non-empty key. All bad lines
    are reported together in a single message.
    """
    bad_lines = [
        number
        for number, line in iter_custom_field_lines(text)
        if split_custom_field(line) is None
    ]
    if not bad_lines:
        return ValidationResult.ok()

    noun = "line" if len(bad_lines) == 1 else "lines"
    numbers = ", ".join(str(n) for n in bad_lines)
    return ValidationResult.fail(f"{CUSTOM_FIELDS_RULE} (check {noun} {numbers})")


def parse_dimension(text: Optional[str]) -> Optional[int]:
    """Positive pixel count written in ASCII digits, or None for anything else."""
    value = (text or "").strip()
    if not _DIMENSION.fullmatch(value):
        return None
    number = int(value)
    return number if number > 0 else None


def validate_dimension(text: Optional[str]) -> ValidationResult:
    """Selection height and width must be positive whole numbers when given."""
    if text is None or not text.strip():
        return ValidationResult.ok()
    if parse_dimension(text) is None:
        return ValidationResult.fail(
            f"Selection dimensions must be positive whole numbers, got {text.strip()!r}"
        )
    return ValidationResult.ok()


def enum_values(choices: Type[Enum]) -> Tuple[str, ...]:
    return tuple(choice.value for choice in choices)


def validate_choice(choices: Type[Enum], label: str) -> Validator:
    """
    Build a validator accepting an empty value or one member of an enumeration.

    Args:
        choices: Enumeration whose values are the allowed field values
        label: Human-readable field name used in the failure message

    Returns:
        Validator function for the field
    """
    allowed = enum_values(choices)

    def validator(text: Optional[str]) -> ValidationResult:
        if not text or text in allowed:
            return ValidationResult.ok()
        return ValidationResult.fail(
            f"{label} must be one of {', '.join(allowed)}, got {text!r}"
        )

    return validator


def validate_placements(keys: Iterable[str]) -> ValidationResult:
    unknown = [key for key in keys if get_placement(key) is None]
    if not unknown:
        return ValidationResult.ok()
    return ValidationResult.fail(f"Unknown placements: {', '.join(unknown)}")


def build_validators() -> Dict[str, Validator]:
    """
    Validators for the scalar form fields, keyed by form field name.

    Placements are a repeated field and are checked separately with
    validate_placements.
    """
    return {
        "privacy_level": validate_choice(PrivacyLevel, "Privacy level"),
        "visibility": validate_choice(Visibility, "Visibility"),
        "custom_fields": validate_custom_fields,
        "selection_height": validate_dimension,
        "selection_width": validate_dimension,
    }


__all__ = [
    'PrivacyLevel',
    'Visibility',
    'ValidationResult',
    'Validator',
    'CUSTOM_FIELDS_RULE',
    'split_custom_field',
    'iter_custom_field_lines',
    'validate_custom_fields',
    'parse_dimension',
    'validate_dimension',
    'enum_values',
    'validate_choice',
    'validate_placements',
    'build_validators',
]
