"""
LTI XML Builder Application Settings

Loads the web application's settings from built-in defaults, an optional
JSON, YAML or TOML file, and LTIXML_* environment variables, in that order
of precedence. Settings only cover how the application is served; the
descriptor itself has no external configuration.

Copyright (c) 2025 LTI XML Builder contributors
"""

import datetime
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Final, Mapping, Optional, Union

import toml
import yaml
from pydantic import Field, ValidationError, field_validator
from pydantic.dataclasses import dataclass as pydantic_dataclass


logger = logging.getLogger(__name__)

ENV_PREFIX: Final[str] = "LTIXML_"
CONFIG_ENV_VAR: Final[str] = f"{ENV_PREFIX}CONFIG"
LOG_FORMAT: Final[str] = '%(asctime)s - %(levelname)s - %(message)s'
LOG_LEVELS: Final = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class LTIXMLError(Exception):
    """Base exception for application errors with structured context."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.timestamp = datetime.datetime.now(datetime.timezone.utc)


class ConfigurationError(LTIXMLError):
    """Settings file missing, unreadable, in an unknown format, or invalid."""
    pass


@pydantic_dataclass(frozen=True)
class Settings:
    """Immutable application settings."""

    host: str = Field("127.0.0.1", min_length=1, description="Interface to bind")
    port: int = Field(8000, ge=1, le=65535, description="TCP port to listen on")
    log_level: str = Field("INFO", description="Root logging level")
    page_title: str = Field("LTI XML Builder", description="Heading of the form page")
    reload: bool = Field(False, description="Restart the server on code changes")

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level


def load_config_file(config_path: Path) -> Dict[str, Any]:
    """
    Read a settings file, choosing the parser by file extension.

    Args:
        config_path: Path to a .json, .yml, .yaml or .toml file

    Returns:
        Parsed settings mapping
    """
    if not config_path.exists():
        raise ConfigurationError(
            f"Configuration file not found: {config_path}", {"path": str(config_path)}
        )

    suffix = config_path.suffix.lower()
    try:
        content = config_path.read_text(encoding='utf-8')
        if suffix == '.json':
            data = json.loads(content)
        elif suffix in ('.yml', '.yaml'):
            data = yaml.safe_load(content)
        elif suffix == '.toml':
            data = toml.loads(content)
        else:
            raise ConfigurationError(
                f"Unsupported configuration format: {config_path}",
                {"path": str(config_path), "suffix": suffix},
            )
    except (OSError, json.JSONDecodeError, yaml.YAMLError, toml.TomlDecodeError) as e:
        raise ConfigurationError(
            f"Could not read configuration file {config_path}: {e}",
            {"path": str(config_path)},
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Configuration file must contain a mapping: {config_path}",
            {"path": str(config_path)},
        )
    return data


def _environment_overrides(environ: Mapping[str, str]) -> Dict[str, str]:
    overrides = {}
    for name in ("host", "port", "log_level", "page_title", "reload"):
        value = environ.get(f"{ENV_PREFIX}{name.upper()}")
        if value is not None:
            overrides[name] = value
    return overrides


def load_settings(
    config_path: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """
    Resolve the application settings.

    Args:
        config_path: Settings file; falls back to $LTIXML_CONFIG when omitted
        environ: Environment mapping, os.environ by default

    Returns:
        Validated settings
    """
    environ = os.environ if environ is None else environ
    if config_path is None:
        config_path = environ.get(CONFIG_ENV_VAR)

    values: Dict[str, Any] = {}
    if config_path:
        values.update(load_config_file(Path(config_path)))
        logger.info(f"Loaded settings from {config_path}")
    values.update(_environment_overrides(environ))

    try:
        return Settings(**values)
    except (TypeError, ValidationError) as e:
        raise ConfigurationError(f"Invalid settings: {e}", {"values": values}) from e


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


__all__ = [
    'LTIXMLError',
    'ConfigurationError',
    'Settings',
    'load_config_file',
    'load_settings',
    'configure_logging',
]
