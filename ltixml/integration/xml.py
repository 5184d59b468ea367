"""
LTI Tool XML Descriptor Builder

Maps an immutable tool configuration record onto the XML descriptor consumed
by the Canvas external-tool importer. The builder is a pure, total function:
any XMLOptions, including the all-empty record used for the initial page
load, produces a well-formed document, and the same record always produces
byte-identical output.

Copyright (c) 2025 LTI XML Builder contributors
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, Final, Optional, Tuple, Type
from xml.etree.ElementTree import Element, SubElement, indent, tostring

from pydantic import Field, field_validator
from pydantic.dataclasses import dataclass as pydantic_dataclass

from ltixml.integration.validation import (
    PrivacyLevel,
    Visibility,
    enum_values,
    iter_custom_field_lines,
    parse_dimension,
    split_custom_field,
)


PLATFORM: Final[str] = "canvas.instructure.com"
XML_DECLARATION: Final[str] = '<?xml version="1.0" encoding="UTF-8"?>'
DEFAULT_SELECTION_DIMENSION: Final[str] = "500"
DEFAULT_PRIVACY_LEVEL: Final[PrivacyLevel] = PrivacyLevel.PUBLIC
DEFAULT_VISIBILITY: Final[Visibility] = Visibility.PUBLIC

# Characters outside the XML 1.0 Char production cannot be escaped, only dropped
_ILLEGAL_XML_CHARS = re.compile(
    "[^\u0009\u000A\u000D\u0020-\uD7FF\uE000-\uFFFD\U00010000-\U0010FFFF]"
)


@pydantic_dataclass(frozen=True)
class XMLOptions:
    """
    Immutable tool configuration collected from the form.

    No field is required. Absent values serialize to empty elements or to the
    defaults the form pre-fills.
    """

    title: Optional[str] = Field(None, description="Tool name shown in Canvas")
    description: Optional[str] = Field(None, description="Free-text description")
    domain: Optional[str] = Field(None, description="Domain used to match launch URLs")
    launch_url: Optional[str] = Field(None, description="Default launch URL")
    privacy_level: Optional[str] = Field(None, description="public, name_only or anonymous")
    selection_height: Optional[str] = Field(None, description="Selection dialog height in pixels")
    selection_width: Optional[str] = Field(None, description="Selection dialog width in pixels")
    oauth_compliant: bool = Field(False, description="Keep launch URL query parameters out of the POST body")
    visibility: Optional[str] = Field(None, description="public, members or admins")
    custom_fields: Optional[str] = Field(None, description="Raw key=value lines")
    placements: Tuple[str, ...] = Field((), description="Selected placement identifiers")

    @field_validator('placements')
    @classmethod
    def unique_placements(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        """Drop repeated identifiers, keeping first-submission order."""
        return tuple(dict.fromkeys(v))

    @classmethod
    def from_form(cls, form: Any) -> XMLOptions:
        """
        Build options from submitted form data.

        Args:
            form: Multi-valued form mapping exposing get() and getlist(), such
                as Starlette's FormData

        Returns:
            Options record for this submission
        """
        def param(name: str) -> Optional[str]:
            value = form.get(name)
            return value if isinstance(value, str) else None

        return cls(
            title=param("tool_name"),
            description=param("description"),
            domain=param("tool_domain"),
            launch_url=param("launch_url"),
            privacy_level=param("privacy_level"),
            selection_height=param("selection_height"),
            selection_width=param("selection_width"),
            oauth_compliant="oauth_compliant" in form,
            visibility=param("visibility"),
            custom_fields=param("custom_fields"),
            placements=tuple(
                value for value in form.getlist("placements") if isinstance(value, str)
            ),
        )


def _clean(value: Optional[str]) -> str:
    """Drop characters XML cannot carry; line breaks become bare newlines."""
    if not value:
        return ""
    text = value.replace("\r\n", "\n").replace("\r", "\n")
    return _ILLEGAL_XML_CHARS.sub("", text)


def _text_node(parent: Element, tag: str, value: Optional[str]) -> Element:
    node = SubElement(parent, tag)
    text = _clean(value)
    if text:
        node.text = text
    return node


def _choice(value: Optional[str], choices: Type[Enum], default: Enum) -> str:
    return value if value in enum_values(choices) else default.value


def _dimension(value: Optional[str]) -> str:
    number = parse_dimension(value)
    return DEFAULT_SELECTION_DIMENSION if number is None else str(number)


def _add_custom_fields(root: Element, text: Optional[str]) -> None:
    """One <field> per key=value line; malformed lines were rejected upstream."""
    custom = SubElement(root, "custom_fields")
    for _, line in iter_custom_field_lines(text):
        pair = split_custom_field(line)
        if pair is None:
            continue
        key, value = pair
        field_node = SubElement(custom, "field", {"name": _clean(key)})
        if value:
            field_node.text = _clean(value)


def _add_placements(root: Element, placements: Tuple[str, ...]) -> None:
    block = SubElement(root, "placements")
    for key in placements:
        SubElement(block, "placement", {"name": _clean(key), "enabled": "true"})


def build_xml(options: XMLOptions) -> str:
    """
    Render the tool descriptor.

    Args:
        options: Tool configuration; every field may be unset

    Returns:
        Pretty-printed XML document, starting with the XML declaration
    """
    root = Element("tool", {"platform": PLATFORM})

    _text_node(root, "title", options.title)
    _text_node(root, "description", options.description)
    _text_node(root, "domain", options.domain)
    _text_node(root, "launch_url", options.launch_url)
    _text_node(
        root, "privacy_level",
        _choice(options.privacy_level, PrivacyLevel, DEFAULT_PRIVACY_LEVEL),
    )
    _text_node(root, "selection_height", _dimension(options.selection_height))
    _text_node(root, "selection_width", _dimension(options.selection_width))
    _text_node(root, "oauth_compliant", "true" if options.oauth_compliant else "false")
    _text_node(
        root, "visibility",
        _choice(options.visibility, Visibility, DEFAULT_VISIBILITY),
    )
    _add_custom_fields(root, options.custom_fields)
    _add_placements(root, options.placements)

    indent(root, space="  ")
    return f"{XML_DECLARATION}\n{tostring(root, encoding='unicode')}\n"


__all__ = [
    'XMLOptions',
    'build_xml',
    'PLATFORM',
    'DEFAULT_SELECTION_DIMENSION',
    'DEFAULT_PRIVACY_LEVEL',
    'DEFAULT_VISIBILITY',
]
