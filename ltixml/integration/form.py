"""
Configuration Form Handler

Turns a form submission (or the initial empty page load) into the single
response shape the rendering layer consumes: the XML document or the error
text that replaces it, the serialized error tracker, and the placement
catalog.

Copyright (c) 2025 LTI XML Builder contributors
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from ltixml.integration.errors import ErrorTracker, SerializedErrorTracker
from ltixml.integration.placements import PLACEMENTS, Placement
from ltixml.integration.validation import (
    ValidationResult,
    build_validators,
    validate_placements,
)
from ltixml.integration.xml import XMLOptions, build_xml


logger = logging.getLogger(__name__)

# Form field name -> XMLOptions attribute, for the fields that are validated
VALIDATED_FIELDS: Dict[str, str] = {
    "privacy_level": "privacy_level",
    "visibility": "visibility",
    "custom_fields": "custom_fields",
    "selection_height": "selection_height",
    "selection_width": "selection_width",
}
TRACKED_FIELDS: Tuple[str, ...] = tuple(VALIDATED_FIELDS) + ("placements",)


@dataclass(frozen=True)
class PageData:
    """
    Everything one render of the configuration page needs.

    The shape is the same for the initial load and for a submission, so the
    template never special-cases the zero-error state.
    """

    xml: str
    error_tracker: SerializedErrorTracker
    placements: Tuple[Placement, ...] = PLACEMENTS

    @property
    def has_errors(self) -> bool:
        return self.error_tracker["has_errors"]

    def to_json(self) -> Dict[str, Any]:
        return {
            "xml": self.xml,
            "error_tracker": self.error_tracker,
            "placements": [p.to_json() for p in self.placements],
        }


def validate_options(options: XMLOptions) -> ErrorTracker:
    """
    Run every field validator over the options.

    Args:
        options: Parsed form submission

    Returns:
        Tracker reporting every tracked field, failed or not
    """
    validators = build_validators()
    results: List[Tuple[str, ValidationResult]] = [
        (name, validators[name](getattr(options, attribute)))
        for name, attribute in VALIDATED_FIELDS.items()
    ]
    results.append(("placements", validate_placements(options.placements)))
    return ErrorTracker.from_results(results, TRACKED_FIELDS)


def load() -> PageData:
    """Data for the initial page load: the placeholder document and no errors."""
    return PageData(
        xml=build_xml(XMLOptions()),
        error_tracker=ErrorTracker.for_fields(TRACKED_FIELDS).to_json(),
    )


def submit(form: Any) -> PageData:
    """
    Handle a form submission.

    The document and the error text are mutually exclusive: when any field
    fails validation the tracker text replaces the XML entirely.

    Args:
        form: Submitted form data exposing get() and getlist()

    Returns:
        Page data for the post-submission render
    """
    return render_options(XMLOptions.from_form(form))


def render_options(options: XMLOptions) -> PageData:
    tracker = validate_options(options)

    if tracker.has_errors():
        failed = sorted(name for name, message in tracker.errors.items() if message)
        logger.debug(f"Rejected configuration for {options.title!r}: {', '.join(failed)}")
        body = tracker.text
    else:
        logger.debug(f"Generated descriptor for {options.title!r}")
        body = build_xml(options)

    return PageData(xml=body, error_tracker=tracker.to_json())


__all__ = [
    'PageData',
    'TRACKED_FIELDS',
    'validate_options',
    'load',
    'submit',
    'render_options',
]
