"""
LTI XML Builder Web Application

FastAPI application serving the configuration form. The page is rendered
server-side with Jinja2; a JSON endpoint and a raw descriptor endpoint expose
the same form handling to scripts.

Copyright (c) 2025 LTI XML Builder contributors
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Final, Optional

import jinja2
import orjson
from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, Response
from markupsafe import Markup

from ltixml.integration.form import PageData, load, render_options
from ltixml.integration.placements import PLACEMENTS
from ltixml.integration.validation import PrivacyLevel, Visibility, enum_values
from ltixml.integration.xml import DEFAULT_SELECTION_DIMENSION, XMLOptions
from ltixml.settings import Settings, load_settings


logger = logging.getLogger(__name__)

CANVAS_DOCS_URL: Final[str] = "https://canvas.instructure.com/doc/api/file.tools_xml.html"

INDEX_TEMPLATE: Final[str] = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{{ title }}</title>
</head>
<body style="font-family: system-ui, sans-serif; line-height: 1.4">
    <h1>{{ title }}</h1>
    <h3>Configuration</h3>
    <p>(See the <a href="{{ docs_url }}">Canvas API docs</a> for information on these options)</p>
    {% if page.has_errors %}
    <p class="error-text" style="color: red">{{ page.error_tracker.text | nl2br }}</p>
    {% endif %}
    <form method="post" action="/">
        <table>
            <tr><td><label for="tool_name">Tool Name</label></td>
                <td><input id="tool_name" name="tool_name" value="{{ options.title or '' }}"></td></tr>
            <tr><td><label for="description">Description</label></td>
                <td><input id="description" name="description" value="{{ options.description or '' }}"></td></tr>
            <tr><td><label for="tool_domain">Tool Domain</label></td>
                <td><input id="tool_domain" name="tool_domain" value="{{ options.domain or '' }}"></td></tr>
            <tr><td><label for="launch_url">Launch URL</label></td>
                <td><input id="launch_url" name="launch_url" value="{{ options.launch_url or '' }}"></td></tr>
            <tr><td><label for="privacy_level">Privacy Level</label></td>
                <td><select id="privacy_level" name="privacy_level">
                {% for level in privacy_levels %}
                    <option value="{{ level }}"{% if level == options.privacy_level %} selected{% endif %}>{{ level }}</option>
                {% endfor %}
                </select>
                {{ field_error('privacy_level') }}</td></tr>
            <tr><td><label for="oauth_compliant">OAuth Compliant</label></td>
                <td><input id="oauth_compliant" name="oauth_compliant" type="checkbox"{% if options.oauth_compliant %} checked{% endif %}>
                <small>Does not copy launch URL query parameters to POST body when true</small></td></tr>
            <tr><td><label for="visibility">Visibility</label></td>
                <td><select id="visibility" name="visibility">
                {% for visibility in visibilities %}
                    <option value="{{ visibility }}"{% if visibility == options.visibility %} selected{% endif %}>{{ visibility }}</option>
                {% endfor %}
                </select>
                {{ field_error('visibility') }}</td></tr>
            <tr><td><label for="custom_fields">Custom Fields</label><br><small>(key=value, one per line)</small></td>
                <td><textarea id="custom_fields" name="custom_fields" rows="3" cols="24">{{ options.custom_fields or '' }}</textarea>
                {{ field_error('custom_fields') }}</td></tr>
            <tr><td><label for="selection_height">Selection Height</label></td>
                <td><input id="selection_height" name="selection_height" type="number" value="{{ options.selection_height or default_dimension }}">
                {{ field_error('selection_height') }}</td></tr>
            <tr><td><label for="selection_width">Selection Width</label></td>
                <td><input id="selection_width" name="selection_width" type="number" value="{{ options.selection_width or default_dimension }}">
                {{ field_error('selection_width') }}</td></tr>
            <tr><td colspan="2"><h4>Placements</h4>{{ field_error('placements') }}</td></tr>
            {% for placement in page.placements %}
            <tr><td><label for="placement-{{ placement.key }}">{{ placement.label }}</label></td>
                <td><input id="placement-{{ placement.key }}" name="placements" type="checkbox" value="{{ placement.key }}"{% if placement.key in selected_placements %} checked{% endif %}></td></tr>
            {% endfor %}
        </table>
        <button style="margin-top: 2em" type="submit">Generate</button>
    </form>
    <h3>{% if page.has_errors %}Errors{% else %}XML{% endif %}</h3>
    <pre id="xml-output"{% if page.has_errors %} style="color: red"{% endif %}>{{ page.xml }}</pre>
</body>
</html>
"""


def _nl2br(text: str) -> Markup:
    return Markup("<br>").join(text.splitlines())


def create_template_environment() -> jinja2.Environment:
    """Create the Jinja2 environment holding the form page template."""
    env = jinja2.Environment(
        loader=jinja2.DictLoader({"index.html": INDEX_TEMPLATE}),
        autoescape=jinja2.select_autoescape(['html', 'xml']),
        undefined=jinja2.StrictUndefined,
    )
    env.filters['nl2br'] = _nl2br
    return env


def render_page(
    env: jinja2.Environment,
    page: PageData,
    options: XMLOptions,
    title: str,
    initial: bool = False,
) -> str:
    """
    Render the form page.

    Args:
        env: Template environment from create_template_environment
        page: Document or error text, error map and placement catalog
        options: Submitted values to pre-fill
        title: Page heading
        initial: True for the first page load, which pre-checks the
            default-active placements

    Returns:
        HTML document
    """
    if initial:
        selected = {p.key for p in page.placements if p.default_active}
    else:
        selected = set(options.placements)

    def field_error(name: str) -> Markup:
        message = page.error_tracker["errors"].get(name)
        if not message:
            return Markup("")
        return Markup('<span class="field-error" style="color: red">{}</span>').format(message)

    return env.get_template("index.html").render(
        page=page,
        options=options,
        title=title,
        docs_url=CANVAS_DOCS_URL,
        privacy_levels=enum_values(PrivacyLevel),
        visibilities=enum_values(Visibility),
        default_dimension=DEFAULT_SELECTION_DIMENSION,
        selected_placements=selected,
        field_error=field_error,
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the web application.

    Args:
        settings: Application settings; resolved with load_settings when omitted

    Returns:
        Configured FastAPI application
    """
    if settings is None:
        settings = load_settings()

    app = FastAPI(title=settings.page_title)
    env = create_template_environment()

    async def read_options(request: Request) -> XMLOptions:
        form = await request.form()
        return XMLOptions.from_form(form)

    @app.get("/", response_class=HTMLResponse)
    async def index() -> HTMLResponse:
        page = render_page(env, load(), XMLOptions(), settings.page_title, initial=True)
        return HTMLResponse(page)

    @app.post("/", response_class=HTMLResponse)
    async def generate(request: Request) -> HTMLResponse:
        options = await read_options(request)
        page = render_options(options)
        return HTMLResponse(render_page(env, page, options, settings.page_title))

    @app.post("/api/xml")
    async def generate_json(request: Request) -> Response:
        page = render_options(await read_options(request))
        return Response(content=orjson.dumps(page.to_json()), media_type="application/json")

    @app.post("/config.xml")
    async def generate_descriptor(request: Request) -> Response:
        page = render_options(await read_options(request))
        if page.has_errors:
            return PlainTextResponse(page.xml, status_code=422)
        return Response(content=page.xml, media_type="application/xml")

    @app.get("/placements")
    async def placements() -> Response:
        catalog: Dict[str, Any] = {"placements": [p.to_json() for p in PLACEMENTS]}
        return Response(content=orjson.dumps(catalog), media_type="application/json")

    logger.debug(f"Created application {settings.page_title!r}")
    return app


__all__ = [
    'INDEX_TEMPLATE',
    'create_template_environment',
    'render_page',
    'create_app',
]
