"""
Error tracker tests.
"""

from ltixml.integration.errors import ErrorTracker
from ltixml.integration.validation import ValidationResult


def test_fresh_tracker_has_no_errors():
    tracker = ErrorTracker()
    assert not tracker.has_errors()
    assert tracker.text == ""
    assert tracker.to_json() == {"errors": {}, "has_errors": False, "text": ""}


def test_for_fields_reports_every_field():
    tracker = ErrorTracker.for_fields(["custom_fields", "visibility"])
    assert tracker.to_json() == {
        "errors": {"custom_fields": None, "visibility": None},
        "has_errors": False,
        "text": "",
    }


def test_add_returns_new_tracker():
    tracker = ErrorTracker.for_fields(["custom_fields"])
    failed = tracker.add("custom_fields", ValidationResult.fail("bad line"))

    assert not tracker.has_errors()
    assert failed.has_errors()
    assert failed.error_for("custom_fields") == "bad line"


def test_success_does_not_overwrite_failure():
    tracker = (
        ErrorTracker()
        .add("custom_fields", ValidationResult.fail("bad line"))
        .add("custom_fields", ValidationResult.ok())
    )
    assert tracker.has_errors()
    assert tracker.error_for("custom_fields") == "bad line"


def test_success_records_field_without_message():
    tracker = ErrorTracker().add("visibility", ValidationResult.ok())
    assert tracker.errors == {"visibility": None}
    assert not tracker.has_errors()


def test_text_joins_messages_in_order():
    tracker = ErrorTracker.from_results([
        ("selection_height", ValidationResult.fail("height is wrong")),
        ("visibility", ValidationResult.ok()),
        ("custom_fields", ValidationResult.fail("fields are wrong")),
    ])
    assert tracker.text == "height is wrong\nfields are wrong"


def test_serialized_shape_is_stable():
    names = ["custom_fields", "placements"]
    clean = ErrorTracker.from_results([], names).to_json()
    dirty = ErrorTracker.from_results(
        [("placements", ValidationResult.fail("Unknown placements: x"))], names
    ).to_json()

    assert clean.keys() == dirty.keys()
    assert clean["errors"].keys() == dirty["errors"].keys()
    assert dirty["has_errors"] is True
    assert dirty["errors"]["placements"] == "Unknown placements: x"
    assert dirty["errors"]["custom_fields"] is None


def test_errors_property_is_a_copy():
    tracker = ErrorTracker.for_fields(["custom_fields"])
    tracker.errors["custom_fields"] = "tampered"
    assert tracker.error_for("custom_fields") is None
