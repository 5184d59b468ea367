"""
Form handler tests: parsing, validation folding, and document/error selection.
"""

import xml.etree.ElementTree as ET

from starlette.datastructures import FormData

from ltixml.integration.form import TRACKED_FIELDS, load, submit, validate_options
from ltixml.integration.placements import PLACEMENTS
from ltixml.integration.xml import XMLOptions


def test_load_returns_placeholder_document():
    page = load()
    root = ET.fromstring(page.xml.encode("utf-8"))

    assert root.findtext("selection_height") == "500"
    assert page.has_errors is False
    assert page.error_tracker["text"] == ""
    assert set(page.error_tracker["errors"]) == set(TRACKED_FIELDS)
    assert page.placements == PLACEMENTS


def test_from_form_reads_every_field():
    form = FormData([
        ("tool_name", "Demo"),
        ("description", "A tool"),
        ("tool_domain", "example.com"),
        ("launch_url", "https://example.com/launch"),
        ("privacy_level", "name_only"),
        ("selection_height", "400"),
        ("selection_width", "600"),
        ("oauth_compliant", "on"),
        ("visibility", "members"),
        ("custom_fields", "a=1"),
        ("placements", "course_navigation"),
        ("placements", "editor_button"),
    ])
    options = XMLOptions.from_form(form)

    assert options == XMLOptions(
        title="Demo",
        description="A tool",
        domain="example.com",
        launch_url="https://example.com/launch",
        privacy_level="name_only",
        selection_height="400",
        selection_width="600",
        oauth_compliant=True,
        visibility="members",
        custom_fields="a=1",
        placements=("course_navigation", "editor_button"),
    )


def test_unchecked_checkbox_is_false():
    options = XMLOptions.from_form(FormData([("tool_name", "Demo")]))
    assert options.oauth_compliant is False
    assert options.placements == ()
    assert options.description is None


def test_submit_example_produces_document():
    page = submit(FormData([
        ("tool_name", "Demo"),
        ("privacy_level", "anonymous"),
        ("custom_fields", "foo=bar\nbaz=qux"),
    ]))

    assert page.has_errors is False
    assert "<privacy_level>anonymous</privacy_level>" in page.xml
    fields = ET.fromstring(page.xml.encode("utf-8")).findall("custom_fields/field")
    assert [(f.get("name"), f.text) for f in fields] == [("foo", "bar"), ("baz", "qux")]


def test_submit_malformed_custom_fields_returns_error_text():
    page = submit(FormData([("tool_name", "Demo"), ("custom_fields", "not-a-pair")]))

    assert page.has_errors is True
    assert page.error_tracker["text"]
    assert page.xml == page.error_tracker["text"]
    assert not page.xml.startswith("<?xml")
    assert page.error_tracker["errors"]["custom_fields"]
    assert [name for name, message in page.error_tracker["errors"].items() if message] == [
        "custom_fields"
    ]


def test_submit_collects_errors_from_several_fields():
    page = submit(FormData([
        ("selection_height", "tall"),
        ("privacy_level", "everything"),
        ("placements", "nowhere"),
    ]))
    errors = page.error_tracker["errors"]

    assert errors["selection_height"]
    assert errors["privacy_level"]
    assert errors["placements"]
    assert errors["custom_fields"] is None
    assert len(page.xml.splitlines()) == 3


def test_validate_options_on_empty_record():
    tracker = validate_options(XMLOptions())
    assert not tracker.has_errors()
    assert set(tracker.errors) == set(TRACKED_FIELDS)


def test_page_data_to_json():
    data = load().to_json()
    assert set(data) == {"xml", "error_tracker", "placements"}
    assert data["placements"][0] == {
        "key": PLACEMENTS[0].key,
        "label": PLACEMENTS[0].label,
        "default_active": PLACEMENTS[0].default_active,
    }


def test_submit_unicode_digit_dimension_is_a_validation_error():
    page = submit(FormData([("selection_height", "5²")]))

    assert page.has_errors is True
    assert "'5²'" in page.error_tracker["errors"]["selection_height"]
    assert page.xml == page.error_tracker["text"]
