"""
Command line interface tests.
"""

import xml.etree.ElementTree as ET

import pytest
from click.testing import CliRunner

from ltixml.cli import cli, options_from_mapping


@pytest.fixture
def runner(monkeypatch):
    monkeypatch.delenv("LTIXML_CONFIG", raising=False)
    return CliRunner()


def test_options_from_mapping():
    options = options_from_mapping({
        "tool_name": "Demo",
        "selection_height": 640,
        "oauth_compliant": True,
        "placements": "course_navigation",
    })
    assert options.title == "Demo"
    assert options.selection_height == "640"
    assert options.oauth_compliant is True
    assert options.placements == ("course_navigation",)
    assert options.description is None


def test_render_to_file(runner, tmp_path):
    fields = tmp_path / "tool.yaml"
    fields.write_text(
        "tool_name: Demo\n"
        "privacy_level: anonymous\n"
        "custom_fields: |\n"
        "  foo=bar\n"
        "  baz=qux\n"
        "placements:\n"
        "  - course_navigation\n"
    )
    output = tmp_path / "tool.xml"

    result = runner.invoke(cli, ["render", str(fields), "-o", str(output)])

    assert result.exit_code == 0
    root = ET.fromstring(output.read_bytes())
    assert root.findtext("privacy_level") == "anonymous"
    assert len(root.findall("custom_fields/field")) == 2
    assert root.find("placements/placement").get("name") == "course_navigation"


def test_render_to_stdout(runner, tmp_path):
    fields = tmp_path / "tool.toml"
    fields.write_text('tool_name = "Demo"\n')

    result = runner.invoke(cli, ["render", str(fields)])

    assert result.exit_code == 0
    assert "<title>Demo</title>" in result.output


def test_render_with_validation_errors(runner, tmp_path):
    fields = tmp_path / "tool.json"
    fields.write_text('{"custom_fields": "not-a-pair"}')

    result = runner.invoke(cli, ["render", str(fields)])

    assert result.exit_code == 1
    assert "key=value" in result.output


def test_bad_settings_file(runner, tmp_path):
    settings = tmp_path / "settings.cfg"
    settings.write_text("port=1\n")
    fields = tmp_path / "tool.json"
    fields.write_text("{}")

    result = runner.invoke(cli, ["--config", str(settings), "render", str(fields)])

    assert result.exit_code == 1
