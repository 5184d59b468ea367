"""
LTI XML Builder command line interface.

    ltixml serve              run the configuration form web application
    ltixml render FILE        render a descriptor from a file of form fields

Copyright (c) 2025 LTI XML Builder contributors
"""

import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import click
import uvicorn

from ltixml.integration.form import render_options
from ltixml.integration.web import create_app
from ltixml.integration.xml import XMLOptions
from ltixml.settings import LTIXMLError, configure_logging, load_config_file, load_settings


logger = logging.getLogger(__name__)


def options_from_mapping(fields: Dict[str, Any]) -> XMLOptions:
    """
    Build options from a mapping that uses the form's field names.

    Scalar values are converted to strings the way a browser would submit
    them; placements may be a single identifier or a list.
    """
    def param(name: str) -> Optional[str]:
        value = fields.get(name)
        return None if value is None else str(value)

    placements = fields.get("placements") or []
    if isinstance(placements, str):
        placements = [placements]

    return XMLOptions(
        title=param("tool_name"),
        description=param("description"),
        domain=param("tool_domain"),
        launch_url=param("launch_url"),
        privacy_level=param("privacy_level"),
        selection_height=param("selection_height"),
        selection_width=param("selection_width"),
        oauth_compliant=bool(fields.get("oauth_compliant", False)),
        visibility=param("visibility"),
        custom_fields=param("custom_fields"),
        placements=tuple(str(p) for p in placements),
    )


@click.group()
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None,
              help="Settings file (JSON, YAML or TOML).")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[str]) -> None:
    try:
        settings = load_settings(config_path)
    except LTIXMLError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    configure_logging(settings.log_level)
    ctx.obj = settings


@cli.command()
@click.option("--host", default=None, help="Override the configured host.")
@click.option("--port", type=int, default=None, help="Override the configured port.")
@click.pass_obj
def serve(settings, host: Optional[str], port: Optional[int]) -> None:
    """Run the configuration form web application."""
    host = host or settings.host
    port = port or settings.port
    logger.info(f"Serving {settings.page_title} on http://{host}:{port}")
    if settings.reload:
        uvicorn.run("ltixml.integration.web:create_app", factory=True,
                    host=host, port=port, reload=True)
    else:
        uvicorn.run(create_app(settings), host=host, port=port)


@cli.command()
@click.argument("fields_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Write the descriptor here instead of standard output.")
def render(fields_file: Path, output: Optional[Path]) -> None:
    """Render a descriptor from a JSON, YAML or TOML file of form fields."""
    try:
        fields = load_config_file(fields_file)
    except LTIXMLError as e:
        logger.error(f"Could not load form fields: {e}")
        sys.exit(1)

    page = render_options(options_from_mapping(fields))
    if page.has_errors:
        click.echo(page.xml, err=True)
        sys.exit(1)

    if output is None:
        click.echo(page.xml, nl=False)
    else:
        output.write_text(page.xml, encoding='utf-8')
        logger.info(f"Wrote descriptor to {output}")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
